"""
Error taxonomy for the fleet engine.

Only InvalidTransition is meant to reach an operator directly; the other
conditions are recovered locally by the component that detects them and
surface as log records or advisory callbacks.
"""


class FleetEngineError(Exception):
    """Base class for every condition raised by the engine."""


class FetchFailed(FleetEngineError):
    """A position or history fetch failed. Transient; retried on the next tick."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class InvalidCoordinate(FleetEngineError, ValueError):
    """Latitude or longitude missing, non-numeric or out of range."""

    def __init__(self, latitude, longitude, reason="out of range"):
        super().__init__(f"Invalid coordinate ({latitude!r}, {longitude!r}): {reason}")
        self.latitude = latitude
        self.longitude = longitude
        self.reason = reason


class InvalidTransition(FleetEngineError):
    """Illegal distribution route move. Carries the route's actual status."""

    def __init__(self, route_id, action, current_status, detail=None):
        message = f"Cannot {action} route {route_id} while it is {current_status.value}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.route_id = route_id
        self.action = action
        self.current_status = current_status


class StaleResponseDiscarded(FleetEngineError):
    """A fetch resolved after the tracked selection changed. Never raised to callers."""

    def __init__(self, started_generation, current_generation):
        super().__init__(
            f"Discarded response from generation {started_generation} "
            f"(current generation is {current_generation})"
        )
        self.started_generation = started_generation
        self.current_generation = current_generation


class OutOfOrderSamples(FleetEngineError, ValueError):
    """A position sequence whose timestamps decrease."""

    def __init__(self, index):
        super().__init__(f"Sample {index} is older than the sample before it")
        self.index = index

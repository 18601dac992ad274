"""
Distribution route lifecycle.

Routes move pending -> active -> completed, with operator overrides from
active to delayed or issue. A delayed route can still be completed.
Cancelling removes a route from the scheduler entirely. Completed routes
are final.

Every operation validates first and mutates after, so a rejected call
leaves the route exactly as it was.
"""

import logging
import threading
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from utils.errors import InvalidTransition

logger = logging.getLogger('route_utils')


class RouteStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    DELAYED = "delayed"
    ISSUE = "issue"


@dataclass
class DistributionRoute:
    id: str
    vehicle_id: str
    driver: Optional[str]
    total_drop_points: int
    completed_drop_points: int = 0
    scheduled_start: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    estimated_end: Optional[datetime] = None
    status: RouteStatus = RouteStatus.PENDING

    def __post_init__(self):
        if self.total_drop_points < 0:
            raise ValueError("total_drop_points cannot be negative")
        if not 0 <= self.completed_drop_points <= self.total_drop_points:
            raise ValueError(
                f"completed_drop_points must be between 0 and {self.total_drop_points}"
            )

    @property
    def progress_percent(self):
        if not self.total_drop_points:
            return 0
        return round(self.completed_drop_points / self.total_drop_points * 100)

    def to_dict(self):
        data = asdict(self)
        data["status"] = self.status.value
        for key in ("scheduled_start", "start_time", "end_time", "estimated_end"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        data["progress_percent"] = self.progress_percent
        return data


def _utcnow():
    return datetime.now(timezone.utc)


class RouteScheduler:
    """
    Owner of the scheduled distribution routes.

    Args:
        clock (callable): Returns the current datetime; defaults to UTC now
    """

    def __init__(self, clock=None):
        self._routes = {}
        self._clock = clock or _utcnow
        self._lock = threading.Lock()

    def schedule(self, route):
        with self._lock:
            if route.id in self._routes:
                raise ValueError(f"Route {route.id} is already scheduled")
            if route.status is not RouteStatus.PENDING:
                raise ValueError("New routes must be pending")
            self._routes[route.id] = route
            logger.info(f"Scheduled route {route.id} for vehicle {route.vehicle_id} "
                        f"with {route.total_drop_points} drop points")
            return route

    def get(self, route_id):
        with self._lock:
            return self._routes[route_id]

    def active_routes(self):
        """Every route that has not been cancelled, in scheduling order."""
        with self._lock:
            return list(self._routes.values())

    def status_counts(self):
        counts = {status.value: 0 for status in RouteStatus}
        for route in self.active_routes():
            counts[route.status.value] += 1
        return counts

    def _require(self, route, action, *allowed, detail=None):
        if route.status not in allowed:
            logger.warning(f"Rejected {action} on route {route.id} in state {route.status.value}")
            raise InvalidTransition(route.id, action, route.status, detail)

    def start(self, route_id):
        with self._lock:
            route = self._routes[route_id]
            self._require(route, "start", RouteStatus.PENDING)
            route.status = RouteStatus.ACTIVE
            if route.start_time is None:
                route.start_time = self._clock()
            logger.info(f"Route {route_id} started at {route.start_time}")
            return route

    def complete(self, route_id):
        with self._lock:
            route = self._routes[route_id]
            self._require(route, "complete", RouteStatus.ACTIVE, RouteStatus.DELAYED)
            route.status = RouteStatus.COMPLETED
            route.end_time = self._clock()
            route.completed_drop_points = route.total_drop_points
            logger.info(f"Route {route_id} completed at {route.end_time}")
            return route

    def cancel(self, route_id):
        with self._lock:
            route = self._routes[route_id]
            self._require(
                route, "cancel",
                RouteStatus.PENDING, RouteStatus.ACTIVE, RouteStatus.DELAYED, RouteStatus.ISSUE,
            )
            del self._routes[route_id]
            logger.info(f"Route {route_id} cancelled")
            return route

    def record_progress(self, route_id, completed_count):
        with self._lock:
            route = self._routes[route_id]
            self._require(route, "record progress on", RouteStatus.ACTIVE)
            if isinstance(completed_count, bool) or not isinstance(completed_count, int):
                raise InvalidTransition(route.id, "record progress on", route.status,
                                        f"drop point count must be an integer, got {completed_count!r}")
            if completed_count > route.total_drop_points:
                raise InvalidTransition(route.id, "record progress on", route.status,
                                        f"{completed_count} exceeds {route.total_drop_points} drop points")
            if completed_count < route.completed_drop_points:
                raise InvalidTransition(route.id, "record progress on", route.status,
                                        f"{completed_count} is below the recorded "
                                        f"{route.completed_drop_points}")
            route.completed_drop_points = completed_count
            logger.debug(f"Route {route_id} progress {completed_count}/{route.total_drop_points}")
            return route

    def mark_delayed(self, route_id):
        with self._lock:
            route = self._routes[route_id]
            self._require(route, "mark delayed", RouteStatus.ACTIVE)
            route.status = RouteStatus.DELAYED
            logger.info(f"Route {route_id} marked delayed")
            return route

    def mark_issue(self, route_id):
        with self._lock:
            route = self._routes[route_id]
            self._require(route, "mark issue on", RouteStatus.ACTIVE)
            route.status = RouteStatus.ISSUE
            logger.info(f"Route {route_id} marked with an issue")
            return route

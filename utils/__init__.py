"""
Utilities Package

This package holds the synchronous core of the fleet engine:

errors:
    Error taxonomy shared by every component.

geo_utils:
    Great-circle distance, point-in-zone test and coordinate validation.

time_utils:
    Feed timestamp parsing, local-time display and calendar-day reduction.

position_utils:
    Vehicle and position records and parsing of untrusted feed records.

inspection_utils:
    Inspection (STK) due-date classification and expiring-vehicle lookup.

history_utils:
    Track decimation, stop detection, summaries and routing waypoints.

zone_utils:
    Zone registry with per (vehicle, zone) membership and transition events.

alert_utils:
    Notification dispatcher and its sinks.

route_utils:
    Distribution route state machine.

settings_utils:
    Runtime tunables seeded from defaults and the environment.
"""

from .errors import (
    FleetEngineError,
    FetchFailed,
    InvalidCoordinate,
    InvalidTransition,
    OutOfOrderSamples,
    StaleResponseDiscarded,
)
from .geo_utils import distance_km, is_inside, validate_coordinate
from .inspection_utils import InspectionTier, classify_inspection, find_expiring_vehicles
from .history_utils import TrackMode, simplify, stops_only, summarize, routing_waypoints, process_track
from .zone_utils import Zone, ZoneRegistry, TransitionEvent, TransitionKind
from .alert_utils import NotificationDispatcher, Notification
from .route_utils import DistributionRoute, RouteScheduler, RouteStatus
from .settings_utils import get_setting, update_setting

__all__ = [
    # Errors
    'FleetEngineError',
    'FetchFailed',
    'InvalidCoordinate',
    'InvalidTransition',
    'OutOfOrderSamples',
    'StaleResponseDiscarded',

    # Geometry
    'distance_km',
    'is_inside',
    'validate_coordinate',

    # Inspections
    'InspectionTier',
    'classify_inspection',
    'find_expiring_vehicles',

    # History tracks
    'TrackMode',
    'simplify',
    'stops_only',
    'summarize',
    'routing_waypoints',
    'process_track',

    # Zones and notifications
    'Zone',
    'ZoneRegistry',
    'TransitionEvent',
    'TransitionKind',
    'NotificationDispatcher',
    'Notification',

    # Distribution routes
    'DistributionRoute',
    'RouteScheduler',
    'RouteStatus',

    # Settings
    'get_setting',
    'update_setting',
]

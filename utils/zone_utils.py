"""
Zone Registry & Containment Module

Owns the geofence zones of one tracking session and the per (vehicle, zone)
membership table. Each position batch is evaluated against the active zones
and produces enter/exit transition events.

Key Features:
- Zone CRUD with geometry validation (radius in meters, valid center)
- Lazy membership state, starting outside
- Transition events only on real boundary crossings
- Exclusive access through a re-entrant lock

A registry is an ordinary object created by its owner and discarded with
it. Nothing here is module-level state.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from utils.errors import InvalidCoordinate
from utils.geo_utils import is_inside, validate_coordinate

logger = logging.getLogger('zone_utils')


class TransitionKind(Enum):
    ENTER = "enter"
    EXIT = "exit"

    @property
    def opposite(self):
        return TransitionKind.EXIT if self is TransitionKind.ENTER else TransitionKind.ENTER


@dataclass(frozen=True)
class TransitionEvent:
    vehicle_id: str
    zone_id: str
    kind: TransitionKind
    at: Optional[datetime]

    def to_dict(self):
        return {
            "vehicle_id": self.vehicle_id,
            "zone_id": self.zone_id,
            "kind": self.kind.value,
            "at": self.at.isoformat() if self.at else None,
        }


def parse_flag(value):
    # Form and env input arrive as strings
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


@dataclass(frozen=True)
class Zone:
    """
    Circular geofence.

    Attributes:
        id (str): Zone identifier
        name (str): Human label
        center (tuple): (latitude, longitude)
        radius (float): Radius in meters, must be > 0
        color (str): Display color only
        active (bool): Inactive zones are skipped by evaluate
        notify (bool): Whether transitions produce notifications
    """
    id: str
    name: str
    center: Tuple[float, float]
    radius: float
    color: str = "#3b82f6"
    active: bool = True
    notify: bool = True

    def __post_init__(self):
        if not self.id:
            raise ValueError("Zone id is required")
        if self.center is None or len(self.center) != 2:
            raise InvalidCoordinate(None, None, "zone center must be a (latitude, longitude) pair")
        object.__setattr__(self, "center", validate_coordinate(*self.center))
        try:
            radius = float(self.radius)
        except (TypeError, ValueError):
            raise ValueError(f"Zone radius must be a number, got {self.radius!r}")
        if not radius > 0:
            raise ValueError(f"Zone radius must be greater than 0 meters, got {self.radius!r}")
        object.__setattr__(self, "radius", radius)

    @classmethod
    def from_dict(cls, data):
        center = data.get("center")
        if center is None and "latitude" in data:
            center = (data.get("latitude"), data.get("longitude"))
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name", ""),
            center=tuple(center) if center is not None else None,
            radius=data.get("radius"),
            color=data.get("color", "#3b82f6"),
            active=parse_flag(data.get("active", True)),
            notify=parse_flag(data.get("notify", True)),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "center": list(self.center),
            "radius": self.radius,
            "color": self.color,
            "active": self.active,
            "notify": self.notify,
        }


class ZoneRegistry:
    def __init__(self, zones=None):
        self._zones = {}
        self._membership = {}
        self._lock = threading.RLock()
        for zone in zones or []:
            self.add(zone)

    def add(self, zone):
        with self._lock:
            if zone.id in self._zones:
                raise ValueError(f"Zone {zone.id} already exists")
            self._zones[zone.id] = zone
            logger.info(f"Added zone {zone.id} ('{zone.name}') radius={zone.radius}m")
            return zone

    def update(self, zone):
        """
        Replace a zone's definition. Membership is left alone and is
        re-evaluated on the next position batch; no events fire here.
        An inactive replacement drops the zone's membership like set_active.
        """
        with self._lock:
            if zone.id not in self._zones:
                raise KeyError(zone.id)
            self._zones[zone.id] = zone
            if not zone.active:
                self._drop_membership(zone.id)
            logger.info(f"Updated zone {zone.id}")
            return zone

    def remove(self, zone_id):
        with self._lock:
            zone = self._zones.pop(zone_id)
            dropped = [key for key in self._membership if key[1] == zone_id]
            for key in dropped:
                del self._membership[key]
            logger.info(f"Removed zone {zone_id} and {len(dropped)} membership entries")
            return zone

    def set_active(self, zone_id, active):
        with self._lock:
            zone = replace(self._zones[zone_id], active=bool(active))
            self._zones[zone_id] = zone
            if not zone.active:
                self._drop_membership(zone_id)
            logger.info(f"Zone {zone_id} active={zone.active}")
            return zone

    def _drop_membership(self, zone_id):
        # Membership rows only exist for active zones
        for key in [key for key in self._membership if key[1] == zone_id]:
            del self._membership[key]

    def get(self, zone_id):
        with self._lock:
            return self._zones.get(zone_id)

    def zones(self):
        with self._lock:
            return list(self._zones.values())

    def is_member(self, vehicle_id, zone_id):
        with self._lock:
            return self._membership.get((vehicle_id, zone_id), False)

    def membership(self):
        """Snapshot of {(vehicle_id, zone_id): inside} for evaluated pairs."""
        with self._lock:
            return dict(self._membership)

    def forget_vehicle(self, vehicle_id):
        with self._lock:
            for key in [key for key in self._membership if key[0] == vehicle_id]:
                del self._membership[key]

    def evaluate(self, vehicle_id, sample, zones=None):
        """
        Recompute membership of one vehicle against every active zone.

        Args:
            vehicle_id (str): Vehicle being evaluated
            sample (PositionSample): Latest position; skipped when its
                                     timestamp is unknown or its coordinates
                                     are invalid
            zones (list): Zones to evaluate instead of the registry's own

        Returns:
            list: TransitionEvent for every zone whose membership flipped,
                  in zone order
        """
        if sample.timestamp is None:
            logger.debug(f"Skipping zone evaluation for {vehicle_id}: unknown time")
            return []
        try:
            point = validate_coordinate(sample.latitude, sample.longitude)
        except InvalidCoordinate as e:
            logger.warning(f"Skipping zone evaluation for {vehicle_id}: {e}")
            return []

        events = []
        with self._lock:
            candidates = zones if zones is not None else list(self._zones.values())
            for zone in candidates:
                if not zone.active:
                    continue
                key = (vehicle_id, zone.id)
                inside = is_inside(point, zone)
                was_inside = self._membership.setdefault(key, False)
                if inside == was_inside:
                    continue
                self._membership[key] = inside
                kind = TransitionKind.ENTER if inside else TransitionKind.EXIT
                events.append(TransitionEvent(vehicle_id, zone.id, kind, sample.timestamp))
                logger.info(f"Vehicle {vehicle_id} {kind.value} zone {zone.id} at {sample.timestamp}")
        return events

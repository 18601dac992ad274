"""
Position and vehicle records.

Everything the feed returns passes through parse_feed_record before the
rest of the engine sees it. The feed is untrusted: bad coordinates drop the
record, a bad timestamp keeps the record for display but marks the time as
unknown so it never reaches zone evaluation.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from utils.errors import InvalidCoordinate
from utils.geo_utils import validate_coordinate
from utils.time_utils import parse_timestamp, format_local_time

logger = logging.getLogger('position_utils')


class VehicleStatus(Enum):
    ACTIVE = "active"
    IN_SERVICE = "in_service"
    DECOMMISSIONED = "decommissioned"

    @classmethod
    def parse(cls, value):
        """Accept enum values, names and the dashboard's Czech labels."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.ACTIVE
        text = str(value).strip().lower()
        aliases = {
            "aktivní": cls.ACTIVE,
            "aktivni": cls.ACTIVE,
            "servis": cls.IN_SERVICE,
            "in-service": cls.IN_SERVICE,
            "vyřazeno": cls.DECOMMISSIONED,
            "vyrazeno": cls.DECOMMISSIONED,
        }
        if text in aliases:
            return aliases[text]
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown vehicle status: {value!r}")


@dataclass(frozen=True)
class PositionSample:
    vehicle_id: str
    latitude: float
    longitude: float
    timestamp: Optional[datetime]
    speed: Optional[float] = None
    stopped: bool = False

    @property
    def point(self):
        return (self.latitude, self.longitude)

    @property
    def has_known_time(self):
        return self.timestamp is not None

    def to_dict(self):
        return {
            "id": self.vehicle_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "time_display": format_local_time(self.timestamp),
            "speed": self.speed,
            "stopped": self.stopped,
        }


@dataclass
class Vehicle:
    id: str
    status: VehicleStatus = VehicleStatus.ACTIVE
    position: Optional[PositionSample] = None
    inspection_due: Optional[object] = None
    label: Optional[str] = None
    extra: dict = field(default_factory=dict)

    @property
    def is_trackable(self):
        return self.status is not VehicleStatus.DECOMMISSIONED


def _parse_speed(value):
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        # Feeds sometimes send "42 km/h"
        return float(str(value).split()[0])
    except (ValueError, IndexError):
        logger.warning(f"Ignoring malformed speed value: {value!r}")
        return None


def parse_feed_record(record, vehicle_id=None):
    """
    Turn one feed record into a PositionSample.

    Args:
        record (dict): {id, latitude, longitude, timestamp, status?, speed?,
                       stav?, rychlost?}
        vehicle_id: Overrides record['id'] (history responses omit it)

    Returns:
        PositionSample: timestamp is None when it was missing or malformed

    Raises:
        InvalidCoordinate: If latitude/longitude are missing or invalid
    """
    vid = vehicle_id if vehicle_id is not None else record.get("id")
    latitude, longitude = validate_coordinate(record.get("latitude"), record.get("longitude"))
    timestamp = parse_timestamp(record.get("timestamp"))
    if timestamp is None:
        logger.warning(f"Vehicle {vid}: missing or malformed timestamp {record.get('timestamp')!r}")
    speed = _parse_speed(record.get("speed", record.get("rychlost")))
    movement = str(record.get("state", record.get("stav", ""))).lower()
    stopped = movement in ("stopped", "stání", "stani")
    return PositionSample(
        vehicle_id=str(vid),
        latitude=latitude,
        longitude=longitude,
        timestamp=timestamp,
        speed=speed,
        stopped=stopped,
    )


def parse_feed(records, vehicle_id=None):
    """
    Parse a feed response, dropping records with invalid coordinates.

    Returns:
        tuple: (samples, statuses) where statuses maps vehicle id to
               VehicleStatus for every record that carried a status
    """
    samples = []
    statuses = {}
    for record in records or []:
        if not isinstance(record, dict):
            logger.warning(f"Ignoring non-object feed record: {record!r}")
            continue
        try:
            sample = parse_feed_record(record, vehicle_id=vehicle_id)
        except InvalidCoordinate as e:
            logger.warning(f"Dropping record for vehicle {record.get('id', vehicle_id)}: {e}")
            continue
        samples.append(sample)
        raw_status = record.get("status")
        if raw_status is not None:
            try:
                statuses[sample.vehicle_id] = VehicleStatus.parse(raw_status)
            except ValueError as e:
                logger.warning(str(e))
    logger.debug(f"Parsed {len(samples)} of {len(records or [])} feed records")
    return samples, statuses

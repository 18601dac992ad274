"""
Alert Utilities Module

Turns zone transition events into user-facing notifications and hands them
to the configured sinks (log, email, the dashboard's recent list).

Key Features:
- Per-zone gating on the zone's notify flag
- Deduplication per (vehicle, zone): the same kind is never sent twice in
  a row without the opposite transition in between
- Fire-and-forget delivery; a failing sink is logged and skipped
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from utils.settings_utils import get_setting
from utils.time_utils import format_local_time
from utils.zone_utils import TransitionKind

logger = logging.getLogger('alert_utils')


@dataclass(frozen=True)
class Notification:
    vehicle_id: str
    zone_id: str
    zone_name: str
    kind: TransitionKind
    at: Optional[datetime]

    @property
    def message(self):
        verb = "entered" if self.kind is TransitionKind.ENTER else "left"
        return f"Vehicle {self.vehicle_id} {verb} zone '{self.zone_name}' at {format_local_time(self.at)}"

    def to_dict(self):
        return {
            "vehicle_id": self.vehicle_id,
            "zone_id": self.zone_id,
            "zone_name": self.zone_name,
            "kind": self.kind.value,
            "at": self.at.isoformat() if self.at else None,
            "message": self.message,
        }


class NotificationDispatcher:
    """
    Gate, deduplicate and deliver transition notifications.

    Args:
        sinks (list): Callables taking a Notification
    """

    def __init__(self, sinks=None):
        self.sinks = list(sinks or [])
        self._last_kind = {}
        self._lock = threading.Lock()

    def add_sink(self, sink):
        self.sinks.append(sink)

    def dispatch(self, events, zone_lookup):
        """
        Deliver notifications for a list of TransitionEvents.

        Args:
            events (list): TransitionEvents in evaluation order
            zone_lookup (callable): zone_id -> Zone or None

        Returns:
            list: Notifications that were handed to the sinks
        """
        delivered = []
        for event in events:
            zone = zone_lookup(event.zone_id)
            if zone is None:
                logger.debug(f"Unknown zone {event.zone_id}, dropping {event.kind.value}")
                continue

            key = (event.vehicle_id, event.zone_id)
            with self._lock:
                if self._last_kind.get(key) is event.kind:
                    logger.debug(f"Duplicate {event.kind.value} for {key}, not notifying")
                    continue
                # Muted transitions still count, so unmuting cannot swallow the next one
                self._last_kind[key] = event.kind

            if not zone.notify:
                logger.debug(f"Notifications off for zone {event.zone_id}, dropping {event.kind.value}")
                continue

            notification = Notification(
                vehicle_id=event.vehicle_id,
                zone_id=zone.id,
                zone_name=zone.name,
                kind=event.kind,
                at=event.at,
            )
            self._deliver(notification)
            delivered.append(notification)
        return delivered

    def _deliver(self, notification):
        for sink in list(self.sinks):
            try:
                sink(notification)
            except Exception as e:
                logger.error(f"Notification sink {sink!r} failed: {e}", exc_info=True)

    def forget_zone(self, zone_id):
        with self._lock:
            for key in [key for key in self._last_kind if key[1] == zone_id]:
                del self._last_kind[key]

    def forget_vehicle(self, vehicle_id):
        with self._lock:
            for key in [key for key in self._last_kind if key[0] == vehicle_id]:
                del self._last_kind[key]


class LogSink:
    def __init__(self, log=None):
        self.log = log or logger

    def __call__(self, notification):
        self.log.info(notification.message)


class RecentNotifications:
    """Bounded, newest-last list of notifications for the dashboard."""

    def __init__(self, maxlen=100):
        self._items = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def __call__(self, notification):
        with self._lock:
            self._items.append(notification)

    def items(self):
        with self._lock:
            return list(self._items)


class EmailSink:
    """
    Email each notification through EmailService.

    Controlled by the send_zone_emails setting at delivery time, so it can
    be switched on and off without rebuilding the dispatcher.
    """

    def __init__(self, email_service, enabled=None):
        self.email_service = email_service
        self.enabled = enabled

    def __call__(self, notification):
        enabled = self.enabled
        if enabled is None:
            enabled = str(get_setting('send_zone_emails', 'false')).lower() == 'true'
        if not enabled:
            logger.debug("Zone emails disabled, skipping email sink")
            return
        if not self.email_service.send_zone_notification(notification):
            logger.warning(f"Zone email not delivered for {notification.vehicle_id}/{notification.zone_id}")

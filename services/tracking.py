"""
Fleet Tracking Service Module

Wires the live pipeline together: the poller fetches positions from the
feed, each applied batch is evaluated against the zone registry, and the
resulting transitions go through the notification dispatcher.

The tracker owns its registry, dispatcher and subscription. One tracker
corresponds to one dashboard session; nothing is shared between trackers.
"""

import logging
import threading

from background_tasks import PositionPoller
from utils.alert_utils import NotificationDispatcher, RecentNotifications, LogSink
from utils.history_utils import process_track
from utils.position_utils import VehicleStatus
from utils.settings_utils import get_setting
from utils.zone_utils import ZoneRegistry

logger = logging.getLogger(__name__)


class FleetTracker:
    """
    Live tracking session.

    Args:
        feed (PositionFeedService): Source of positions and history
        registry (ZoneRegistry): Zones of this session, a new empty one by default
        dispatcher (NotificationDispatcher): Defaults to log + recent-list sinks
        on_fetch_error (callable): Receives FetchFailed for each failed fetch
    """

    def __init__(self, feed, registry=None, dispatcher=None, on_fetch_error=None):
        self.feed = feed
        self.registry = registry if registry is not None else ZoneRegistry()
        self.recent = RecentNotifications(int(get_setting('notification_history_size', 100)))
        if dispatcher is None:
            dispatcher = NotificationDispatcher([LogSink()])
        dispatcher.add_sink(self.recent)
        self.dispatcher = dispatcher
        self.on_fetch_error = on_fetch_error
        self.last_error = None
        self.statuses = {}
        self._poller = PositionPoller(self._fetch, self.handle_batch, self._handle_error)
        self._subscription = None
        self._lock = threading.Lock()

    def _fetch(self, vehicle_ids):
        samples, statuses = self.feed.get_positions(vehicle_ids)
        self.statuses.update(statuses)
        # Decommissioned vehicles are never tracked, even when the feed reports them
        return [
            s for s in samples
            if self.statuses.get(s.vehicle_id) is not VehicleStatus.DECOMMISSIONED
        ]

    def _handle_error(self, error):
        self.last_error = error
        if self.on_fetch_error is not None:
            self.on_fetch_error(error)

    def handle_batch(self, samples):
        """
        Evaluate one applied position batch and dispatch its transitions.

        Samples are processed in batch order. Samples with an unknown
        timestamp are skipped by the registry.

        Returns:
            list: Notifications delivered for this batch
        """
        self.last_error = None
        delivered = []
        for sample in samples:
            events = self.registry.evaluate(sample.vehicle_id, sample)
            if events:
                delivered.extend(self.dispatcher.dispatch(events, self.registry.get))
        return delivered

    def watch(self, vehicles, interval_seconds=None):
        """
        Start polling the given vehicles, replacing any running subscription.

        Decommissioned vehicles are left out.

        Args:
            vehicles (iterable): Vehicle records or plain vehicle ids, None for all vehicles
            interval_seconds (float): Defaults to the refresh_interval_seconds setting
        """
        ids = None if vehicles is None else []
        for vehicle in vehicles or []:
            if isinstance(vehicle, (str, int)):
                ids.append(str(vehicle))
            elif vehicle.status is not VehicleStatus.DECOMMISSIONED:
                ids.append(str(vehicle.id))
            else:
                logger.info(f"Not polling decommissioned vehicle {vehicle.id}")
        if interval_seconds is None:
            interval_seconds = float(get_setting('refresh_interval_seconds', 30))

        with self._lock:
            if self._subscription is not None:
                self._poller.stop(self._subscription)
            self._subscription = self._poller.start(ids, interval_seconds)
            return self._subscription

    @property
    def subscription(self):
        return self._subscription

    def select(self, vehicle_ids):
        with self._lock:
            if self._subscription is None:
                raise RuntimeError("Tracking has not been started")
            previous = set(self._poller.latest(self._subscription))
            self._poller.select_vehicles(self._subscription, vehicle_ids)
            subscription = self._subscription
        for vehicle_id in [v for v in previous if not subscription.is_selected(v)]:
            self.dispatcher.forget_vehicle(vehicle_id)
            self.registry.forget_vehicle(vehicle_id)

    def set_interval(self, interval_seconds):
        with self._lock:
            if self._subscription is None:
                raise RuntimeError("Tracking has not been started")
            self._poller.update_interval(self._subscription, interval_seconds)

    def refresh(self):
        """Fetch now instead of waiting for the next tick."""
        with self._lock:
            if self._subscription is None:
                raise RuntimeError("Tracking has not been started")
            return self._subscription.tick()

    def stop(self):
        with self._lock:
            if self._subscription is not None:
                self._poller.stop(self._subscription)

    def positions(self):
        if self._subscription is None:
            return {}
        return self._poller.latest(self._subscription)

    def add_zone(self, zone):
        return self.registry.add(zone)

    def update_zone(self, zone):
        zone = self.registry.update(zone)
        if not zone.active:
            self.dispatcher.forget_zone(zone.id)
        return zone

    def remove_zone(self, zone_id):
        zone = self.registry.remove(zone_id)
        self.dispatcher.forget_zone(zone_id)
        return zone

    def set_zone_active(self, zone_id, active):
        zone = self.registry.set_active(zone_id, active)
        if not zone.active:
            self.dispatcher.forget_zone(zone_id)
        return zone

    def history(self, vehicle_id, start=None, end=None, mode="all"):
        """
        Fetch and process the position history of one vehicle.

        Raises:
            FetchFailed: If the history feed cannot be read
            OutOfOrderSamples: If the feed returned an unordered track
        """
        samples = self.feed.get_history(vehicle_id, start, end)
        return process_track(samples, mode)

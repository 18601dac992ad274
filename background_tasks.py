"""
Background task processing module for live vehicle position polling.

This module provides functionality for:
- Periodic, non-overlapping position fetches per subscription
- Runtime changes to the poll interval and the tracked vehicle selection
- Last-good-value retention when a fetch fails
- Discarding responses that resolve after the selection changed

Key Components:
- Subscription: one timer thread plus at most one fetch worker
- PositionPoller: creates and controls subscriptions

Each fetch is tagged with the request generation current when it started.
Changing the selection or stopping the subscription bumps the generation,
and a response is applied only if its generation is still current.
Callbacks run while the subscription lock is held, so once stop() returns
no callback can fire.
"""

import itertools
import logging
import threading

from utils.errors import FetchFailed, StaleResponseDiscarded

logger = logging.getLogger('background_tasks')

_subscription_ids = itertools.count(1)


def _selection(vehicle_ids):
    if vehicle_ids is None:
        return None
    return frozenset(str(v) for v in vehicle_ids)


def _describe(vehicle_ids):
    return "all vehicles" if vehicle_ids is None else f"{len(vehicle_ids)} vehicles"


class Subscription:
    """
    Live polling of one vehicle selection.

    Attributes:
        id (int): Subscription identifier
        interval (float): Seconds between fetch starts
        vehicle_ids (frozenset): Currently selected vehicles, None for all vehicles
        generation (int): Request generation, bumped on selection change and stop
        skipped_ticks (int): Ticks skipped because a fetch was still in flight
        failures (int): Failed fetches since start
    """

    def __init__(self, fetch_positions, on_positions, on_error, vehicle_ids, interval):
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self.id = next(_subscription_ids)
        self.interval = float(interval)
        self.vehicle_ids = _selection(vehicle_ids)
        self.generation = 0
        self.skipped_ticks = 0
        self.failures = 0
        self._fetch_positions = fetch_positions
        self._on_positions = on_positions
        self._on_error = on_error
        self._latest = {}
        self._in_flight = False
        self._stopped = False
        self._lock = threading.RLock()
        self._wakeup = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"position-poller-{self.id}", daemon=True
        )

    def is_selected(self, vehicle_id):
        return self.vehicle_ids is None or vehicle_id in self.vehicle_ids

    @property
    def stopped(self):
        return self._stopped

    @property
    def in_flight(self):
        return self._in_flight

    def start(self):
        self._thread.start()
        logger.info(f"Subscription {self.id} started for {_describe(self.vehicle_ids)}, "
                    f"interval {self.interval}s")

    def _run(self):
        """
        Timer loop. Fetches immediately, then once per interval. A wakeup
        (interval change) restarts the wait with the new interval.
        """
        self.tick()
        while True:
            woke = self._wakeup.wait(self.interval)
            with self._lock:
                if self._stopped:
                    return
                if woke:
                    self._wakeup.clear()
                    continue
            self.tick()

    def tick(self):
        """Start a fetch unless one is still outstanding."""
        with self._lock:
            if self._stopped:
                return False
            if self._in_flight:
                self.skipped_ticks += 1
                logger.debug(f"Subscription {self.id}: fetch still in flight, skipping tick")
                return False
            self._in_flight = True
            generation = self.generation
            vehicle_ids = self.vehicle_ids

        worker = threading.Thread(
            target=self._fetch, args=(generation, vehicle_ids),
            name=f"position-fetch-{self.id}", daemon=True
        )
        worker.start()
        return True

    def _fetch(self, generation, vehicle_ids):
        try:
            try:
                result = self._fetch_positions(vehicle_ids)
            except FetchFailed as e:
                self._fail(generation, e)
                return
            except Exception as e:
                logger.error(f"Subscription {self.id}: unexpected fetch error: {e}", exc_info=True)
                self._fail(generation, FetchFailed(str(e), cause=e))
                return
            self._apply(generation, result)
        finally:
            with self._lock:
                self._in_flight = False

    def _is_current(self, generation):
        if self._stopped or generation != self.generation:
            stale = StaleResponseDiscarded(generation, self.generation)
            logger.debug(f"Subscription {self.id}: {stale}")
            return False
        return True

    def _fail(self, generation, error):
        with self._lock:
            if not self._is_current(generation):
                return
            self.failures += 1
            logger.warning(f"Subscription {self.id}: fetch failed, keeping last known positions: {error}")
            if self._on_error is not None:
                try:
                    self._on_error(error)
                except Exception as e:
                    logger.error(f"Subscription {self.id}: error callback failed: {e}", exc_info=True)

    def _apply(self, generation, samples):
        with self._lock:
            if not self._is_current(generation):
                return
            # The feed may return more than was asked for
            fresh = [s for s in samples if self.is_selected(s.vehicle_id)]
            for sample in fresh:
                self._latest[sample.vehicle_id] = sample
            logger.debug(f"Subscription {self.id}: applied {len(fresh)} positions")
            try:
                self._on_positions(fresh)
            except Exception as e:
                logger.error(f"Subscription {self.id}: position callback failed: {e}", exc_info=True)

    def update_interval(self, interval):
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        with self._lock:
            self.interval = float(interval)
            self._wakeup.set()
        logger.info(f"Subscription {self.id}: interval set to {interval}s")

    def select_vehicles(self, vehicle_ids):
        with self._lock:
            self.vehicle_ids = _selection(vehicle_ids)
            self.generation += 1
            for vehicle_id in [v for v in self._latest if not self.is_selected(v)]:
                del self._latest[vehicle_id]
        logger.info(f"Subscription {self.id}: now tracking {_describe(self.vehicle_ids)}")

    def latest(self):
        with self._lock:
            return dict(self._latest)

    def stop(self):
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self.generation += 1
            self._wakeup.set()
        logger.info(f"Subscription {self.id} stopped")


class PositionPoller:
    """
    Creates and controls position subscriptions.

    Args:
        fetch_positions (callable): vehicle_ids -> list of PositionSample;
                                    raises FetchFailed on failure
        on_positions (callable): Receives each applied batch
        on_error (callable): Receives FetchFailed for each failed fetch
    """

    def __init__(self, fetch_positions, on_positions, on_error=None):
        self.fetch_positions = fetch_positions
        self.on_positions = on_positions
        self.on_error = on_error

    def start(self, vehicle_ids, interval_seconds):
        subscription = Subscription(
            self.fetch_positions, self.on_positions, self.on_error,
            vehicle_ids, interval_seconds
        )
        subscription.start()
        return subscription

    def update_interval(self, handle, new_interval_seconds):
        handle.update_interval(new_interval_seconds)

    def select_vehicles(self, handle, vehicle_ids):
        handle.select_vehicles(vehicle_ids)

    def latest(self, handle):
        return handle.latest()

    def stop(self, handle):
        handle.stop()

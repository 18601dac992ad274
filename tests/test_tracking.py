from unittest.mock import Mock

import pytest

from services.tracking import FleetTracker
from tests.helpers import PRAGUE, sample, wait_until
from utils.errors import FetchFailed
from utils.position_utils import Vehicle, VehicleStatus
from utils.zone_utils import TransitionKind, Zone

FAR = (PRAGUE[0] + 0.018, PRAGUE[1])


@pytest.fixture
def tracker(feed):
    tracker = FleetTracker(feed)
    tracker.add_zone(Zone(id="depot", name="Depot", center=PRAGUE, radius=1000))
    yield tracker
    tracker.stop()


def test_batch_produces_notifications(tracker):
    delivered = tracker.handle_batch([sample("12")])
    assert [n.kind for n in delivered] == [TransitionKind.ENTER]
    assert tracker.recent.items() == delivered

    delivered = tracker.handle_batch([sample("12", lat=FAR[0], lon=FAR[1], minutes=1)])
    assert [n.kind for n in delivered] == [TransitionKind.EXIT]
    assert len(tracker.recent.items()) == 2


def test_batch_clears_last_error(tracker):
    tracker.last_error = FetchFailed("feed down")
    tracker.handle_batch([])
    assert tracker.last_error is None


def test_watch_skips_decommissioned(tracker, feed):
    vehicles = [
        Vehicle(id="12"),
        Vehicle(id="15", status=VehicleStatus.DECOMMISSIONED),
        Vehicle(id="17", status=VehicleStatus.IN_SERVICE),
    ]
    subscription = tracker.watch(vehicles, 60)
    assert subscription.vehicle_ids == frozenset({"12", "17"})
    assert wait_until(lambda: feed.get_positions.called)


def test_decommissioned_in_feed_is_not_tracked(tracker, feed):
    feed.get_positions.return_value = (
        [sample("12"), sample("15")],
        {"15": VehicleStatus.DECOMMISSIONED},
    )
    tracker.watch(None, 60)
    assert wait_until(lambda: "12" in tracker.positions())
    assert "15" not in tracker.positions()
    assert not tracker.registry.is_member("15", "depot")


def test_live_positions_reach_the_registry(tracker, feed):
    feed.get_positions.return_value = ([sample("12")], {})
    tracker.watch(["12"], 60)
    assert wait_until(lambda: tracker.recent.items())
    assert tracker.registry.is_member("12", "depot")


def test_fetch_failure_is_reported(feed):
    errors = Mock()
    feed.get_positions.side_effect = FetchFailed("feed down")
    tracker = FleetTracker(feed, on_fetch_error=errors)
    try:
        tracker.watch(["12"], 60)
        assert wait_until(lambda: errors.called)
        assert isinstance(tracker.last_error, FetchFailed)
    finally:
        tracker.stop()


def test_deselecting_resets_vehicle_state(tracker, feed):
    feed.get_positions.return_value = ([sample("12"), sample("15")], {})
    tracker.watch(["12", "15"], 60)
    assert wait_until(lambda: len(tracker.positions()) == 2)
    assert tracker.registry.is_member("12", "depot")

    tracker.select(["15"])

    assert list(tracker.positions()) == ["15"]
    assert not tracker.registry.is_member("12", "depot")
    assert tracker.registry.is_member("15", "depot")


def test_controls_require_running_subscription(tracker):
    with pytest.raises(RuntimeError):
        tracker.select(["12"])
    with pytest.raises(RuntimeError):
        tracker.set_interval(10)
    with pytest.raises(RuntimeError):
        tracker.refresh()
    assert tracker.positions() == {}


def test_removing_zone_resets_notifications(tracker):
    tracker.handle_batch([sample("12")])
    tracker.remove_zone("depot")
    tracker.add_zone(Zone(id="depot", name="Depot", center=PRAGUE, radius=1000))

    delivered = tracker.handle_batch([sample("12", minutes=1)])
    assert [n.kind for n in delivered] == [TransitionKind.ENTER]


def test_reactivated_zone_notifies_again(tracker):
    tracker.handle_batch([sample("12")])
    tracker.set_zone_active("depot", False)
    assert tracker.handle_batch([sample("12", minutes=1)]) == []
    tracker.set_zone_active("depot", True)

    delivered = tracker.handle_batch([sample("12", minutes=2)])
    assert [n.kind for n in delivered] == [TransitionKind.ENTER]


def test_history_is_processed(tracker, feed):
    feed.get_history.return_value = [sample("12", minutes=i, speed=0.0 if i % 2 else 50.0)
                                     for i in range(6)]
    result = tracker.history("12", mode="stops")
    feed.get_history.assert_called_once_with("12", None, None)
    assert len(result["points"]) == 3
    assert result["summary"].stop_count == 3


def test_deactivating_update_resets_notifications(tracker):
    tracker.handle_batch([sample("12")])
    tracker.update_zone(Zone(id="depot", name="Depot", center=PRAGUE, radius=1000, active=False))
    tracker.update_zone(Zone(id="depot", name="Depot", center=PRAGUE, radius=1000))

    assert tracker.handle_batch([sample("12", lat=FAR[0], lon=FAR[1], minutes=1)]) == []
    delivered = tracker.handle_batch([sample("12", minutes=2)])
    assert [n.kind for n in delivered] == [TransitionKind.ENTER]

from datetime import datetime, timezone

import pytest

from utils.errors import InvalidTransition
from utils.route_utils import DistributionRoute, RouteScheduler, RouteStatus

NOW = datetime(2026, 10, 19, 3, 30, tzinfo=timezone.utc)


@pytest.fixture
def scheduler():
    scheduler = RouteScheduler(clock=lambda: NOW)
    scheduler.schedule(DistributionRoute(id="R1", vehicle_id="12", driver="D-7", total_drop_points=40))
    return scheduler


def test_drop_point_scenario(scheduler):
    assert scheduler.start("R1").status is RouteStatus.ACTIVE

    scheduler.record_progress("R1", 25)
    assert scheduler.get("R1").completed_drop_points == 25
    assert scheduler.get("R1").progress_percent == 62

    with pytest.raises(InvalidTransition):
        scheduler.record_progress("R1", 50)
    assert scheduler.get("R1").completed_drop_points == 25

    route = scheduler.complete("R1")
    assert route.status is RouteStatus.COMPLETED
    assert route.completed_drop_points == 40
    assert route.end_time == NOW
    assert route.progress_percent == 100


def test_start_sets_start_time(scheduler):
    route = scheduler.start("R1")
    assert route.start_time == NOW


def test_start_twice_is_rejected_without_change(scheduler):
    scheduler.start("R1")
    with pytest.raises(InvalidTransition) as excinfo:
        scheduler.start("R1")
    assert excinfo.value.current_status is RouteStatus.ACTIVE
    assert scheduler.get("R1").status is RouteStatus.ACTIVE


def test_complete_requires_active_or_delayed(scheduler):
    with pytest.raises(InvalidTransition):
        scheduler.complete("R1")
    assert scheduler.get("R1").status is RouteStatus.PENDING

    scheduler.start("R1")
    scheduler.mark_delayed("R1")
    assert scheduler.complete("R1").status is RouteStatus.COMPLETED


def test_progress_only_while_active(scheduler):
    with pytest.raises(InvalidTransition):
        scheduler.record_progress("R1", 1)
    scheduler.start("R1")
    scheduler.mark_issue("R1")
    with pytest.raises(InvalidTransition) as excinfo:
        scheduler.record_progress("R1", 1)
    assert excinfo.value.current_status is RouteStatus.ISSUE


def test_progress_is_monotonic(scheduler):
    scheduler.start("R1")
    scheduler.record_progress("R1", 10)
    with pytest.raises(InvalidTransition):
        scheduler.record_progress("R1", 9)
    scheduler.record_progress("R1", 10)
    assert scheduler.get("R1").completed_drop_points == 10


@pytest.mark.parametrize("count", ["5", 2.5, None, True])
def test_progress_requires_integer(scheduler, count):
    scheduler.start("R1")
    with pytest.raises(InvalidTransition):
        scheduler.record_progress("R1", count)
    assert scheduler.get("R1").completed_drop_points == 0


def test_progress_does_not_change_status(scheduler):
    scheduler.start("R1")
    scheduler.record_progress("R1", 40)
    assert scheduler.get("R1").status is RouteStatus.ACTIVE


@pytest.mark.parametrize("moves", [[], ["start"], ["start", "mark_delayed"], ["start", "mark_issue"]])
def test_cancel_removes_route(scheduler, moves):
    for move in moves:
        getattr(scheduler, move)("R1")
    scheduler.cancel("R1")
    assert scheduler.active_routes() == []
    with pytest.raises(KeyError):
        scheduler.get("R1")


def test_completed_route_is_final(scheduler):
    scheduler.start("R1")
    scheduler.complete("R1")
    for action in (scheduler.start, scheduler.cancel, scheduler.mark_delayed, scheduler.mark_issue):
        with pytest.raises(InvalidTransition):
            action("R1")
    assert scheduler.get("R1").status is RouteStatus.COMPLETED


def test_overrides_only_from_active(scheduler):
    with pytest.raises(InvalidTransition):
        scheduler.mark_delayed("R1")
    scheduler.start("R1")
    scheduler.mark_delayed("R1")
    with pytest.raises(InvalidTransition):
        scheduler.mark_issue("R1")


def test_duplicate_schedule_rejected(scheduler):
    with pytest.raises(ValueError):
        scheduler.schedule(DistributionRoute(id="R1", vehicle_id="15", driver=None, total_drop_points=3))


def test_route_validates_counts():
    with pytest.raises(ValueError):
        DistributionRoute(id="R2", vehicle_id="12", driver=None, total_drop_points=5,
                          completed_drop_points=6)


def test_status_counts(scheduler):
    scheduler.schedule(DistributionRoute(id="R2", vehicle_id="15", driver=None, total_drop_points=3))
    scheduler.start("R2")
    counts = scheduler.status_counts()
    assert counts["pending"] == 1
    assert counts["active"] == 1
    assert counts["completed"] == 0


def test_error_message_names_current_status(scheduler):
    scheduler.start("R1")
    with pytest.raises(InvalidTransition, match="while it is active"):
        scheduler.start("R1")


def test_to_dict(scheduler):
    data = scheduler.start("R1").to_dict()
    assert data["status"] == "active"
    assert data["start_time"] == NOW.isoformat()
    assert data["progress_percent"] == 0

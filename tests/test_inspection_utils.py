from datetime import date, datetime, timedelta, timezone

import pytest

from utils.inspection_utils import InspectionTier, classify_inspection, find_expiring_vehicles
from utils.position_utils import Vehicle, VehicleStatus

TODAY = date(2026, 10, 19)


@pytest.mark.parametrize("days, tier", [
    (-1, InspectionTier.EXPIRED),
    (-400, InspectionTier.EXPIRED),
    (0, InspectionTier.UPCOMING),
    (30, InspectionTier.UPCOMING),
    (31, InspectionTier.NORMAL),
    (365, InspectionTier.NORMAL),
])
def test_classification_thresholds(days, tier):
    assert classify_inspection(TODAY + timedelta(days=days), TODAY) is tier


@pytest.mark.parametrize("today", [TODAY, date(1999, 1, 1), date(2100, 12, 31), None])
def test_missing_due_date_is_missing(today):
    assert classify_inspection(None, today) is InspectionTier.MISSING


@pytest.mark.parametrize("due", ["", "not a date", "2026-13-45"])
def test_unreadable_due_date_is_missing(due):
    assert classify_inspection(due, TODAY) is InspectionTier.MISSING


def test_classification_is_idempotent():
    due = TODAY + timedelta(days=12)
    assert classify_inspection(due, TODAY) is classify_inspection(due, TODAY)


def test_accepts_iso_strings():
    assert classify_inspection("2026-11-18", "2026-10-19") is InspectionTier.UPCOMING
    assert classify_inspection("2026-11-19", "2026-10-19") is InspectionTier.NORMAL


def test_aware_datetime_uses_local_day():
    # 23:30 UTC on the 17th is already the 18th in Prague
    due = datetime(2026, 10, 17, 23, 30, tzinfo=timezone.utc)
    assert classify_inspection(due, date(2026, 10, 18)) is InspectionTier.UPCOMING


def test_custom_warning_window():
    due = TODAY + timedelta(days=10)
    assert classify_inspection(due, TODAY, warning_days=7) is InspectionTier.NORMAL


def test_find_expiring_vehicles_sorted_and_filtered():
    vehicles = [
        Vehicle(id="1", inspection_due=TODAY + timedelta(days=20)),
        Vehicle(id="2", inspection_due=TODAY + timedelta(days=3)),
        Vehicle(id="3", inspection_due=TODAY + timedelta(days=90)),
        Vehicle(id="4", inspection_due=TODAY - timedelta(days=1)),
        Vehicle(id="5", inspection_due=None),
        Vehicle(id="6", inspection_due=TODAY + timedelta(days=5), status=VehicleStatus.DECOMMISSIONED),
    ]
    assert [v.id for v in find_expiring_vehicles(vehicles, TODAY)] == ["2", "1"]

"""
Utility module for vehicle inspection (STK) due-date handling.

This module provides functionality for:
- Classifying an inspection due date into an urgency tier
- Finding vehicles whose inspection falls inside the warning window

Dates are compared at day granularity in the configured local timezone.
A due date that is missing or cannot be parsed is classified as missing
rather than raising.
"""

import logging
from datetime import timedelta
from enum import Enum
from utils.settings_utils import get_setting
from utils.time_utils import to_local_date, local_today

logger = logging.getLogger('inspection_utils')


class InspectionTier(Enum):
    MISSING = "missing"
    EXPIRED = "expired"
    UPCOMING = "upcoming"
    NORMAL = "normal"


def classify_inspection(due_date, today=None, warning_days=None):
    """
    Map an inspection due date to an urgency tier.

    Args:
        due_date: date, datetime or ISO string; None when no inspection is on file
        today: Reference day (date/datetime/string). Defaults to today's local date
        warning_days (int): Width of the inclusive upcoming window. Defaults
                            to the inspection_warning_days setting (30)

    Returns:
        InspectionTier:
            - MISSING if the due date is absent or unreadable
            - EXPIRED if the due date is strictly before today
            - UPCOMING if it falls within [today, today + warning_days]
            - NORMAL otherwise
    """
    due_day = to_local_date(due_date)
    if due_day is None:
        if due_date not in (None, ""):
            logger.warning(f"Unreadable inspection due date {due_date!r}, classifying as missing")
        return InspectionTier.MISSING

    reference_day = to_local_date(today) if today is not None else local_today()
    if reference_day is None:
        logger.warning(f"Unreadable reference day {today!r}, using today's date")
        reference_day = local_today()

    if warning_days is None:
        warning_days = int(get_setting('inspection_warning_days', 30))

    if due_day < reference_day:
        return InspectionTier.EXPIRED
    if due_day <= reference_day + timedelta(days=warning_days):
        return InspectionTier.UPCOMING
    return InspectionTier.NORMAL


def find_expiring_vehicles(vehicles, today=None):
    """
    Vehicles whose inspection is due within the warning window.

    Decommissioned vehicles are skipped. The result is ordered by due date,
    soonest first.

    Args:
        vehicles (iterable): Vehicle records with inspection_due and status
        today: Reference day, defaults to today's local date

    Returns:
        list: Matching Vehicle records
    """
    expiring = []
    for vehicle in vehicles:
        if not vehicle.is_trackable:
            continue
        if classify_inspection(vehicle.inspection_due, today) is InspectionTier.UPCOMING:
            expiring.append(vehicle)
    expiring.sort(key=lambda v: to_local_date(v.inspection_due))
    logger.info(f"Found {len(expiring)} vehicles with an upcoming inspection")
    return expiring

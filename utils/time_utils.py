"""
Utility module for handling time-related operations and conversions.

This module provides functionality for:
- Parsing feed timestamps (ISO strings, epoch values, datetimes) into UTC
- Converting timestamps to the configured local timezone
- Formatting timestamps for display with an "unknown time" fallback
- Reducing timestamps to local calendar dates for day comparisons

Parsing never raises on malformed input; it returns None so callers can
treat the value as unknown.
"""

import logging
import pytz
from datetime import datetime, date
from utils.settings_utils import get_setting

UNKNOWN_TIME = "Unknown time"

def get_local_timezone():
    """Return the pytz timezone named by the local_timezone setting."""
    name = get_setting('local_timezone', 'Europe/Prague')
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logging.warning(f"Unknown timezone '{name}', falling back to UTC")
        return pytz.UTC

def parse_timestamp(value):
    """
    Parse a timestamp from the position feed into an aware UTC datetime.

    Args:
        value: ISO 8601 string (a trailing 'Z' is accepted), epoch seconds
               or milliseconds, or a datetime

    Returns:
        datetime: Aware datetime in UTC, or None if the value is missing
                  or malformed

    Notes:
        - Naive datetimes and strings without an offset are taken as UTC
        - Epoch values larger than 1e11 are treated as milliseconds
    """
    if value is None or value == "":
        return None
    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, bool):
            return None
        elif isinstance(value, (int, float)):
            seconds = value / 1000.0 if value > 1e11 else value
            parsed = datetime.fromtimestamp(seconds, tz=pytz.UTC)
        elif isinstance(value, str):
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        else:
            logging.warning(f"Unsupported timestamp type: {type(value).__name__}")
            return None
    except (ValueError, OverflowError, OSError) as e:
        logging.warning(f"Could not parse timestamp {value!r}: {e}")
        return None

    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed.astimezone(pytz.UTC)

def format_local_time(timestamp):
    """
    Format a timestamp in the local timezone for display.

    Args:
        timestamp: Anything parse_timestamp accepts

    Returns:
        str: e.g. '19.10.2026 14:05:09 CEST', or UNKNOWN_TIME when the
             timestamp is missing or malformed
    """
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return UNKNOWN_TIME
    local_time = parsed.astimezone(get_local_timezone())
    return local_time.strftime("%d.%m.%Y %H:%M:%S %Z")

def to_local_date(value):
    """
    Reduce a date, datetime or date string to a local calendar date.

    Aware datetimes are converted to the local timezone first, so a UTC
    timestamp late in the evening lands on the correct local day. Naive
    datetimes are taken as local wall-clock time.

    Returns:
        date: The calendar date, or None if the value is missing or malformed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(get_local_timezone()).date()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError as e:
            logging.warning(f"Could not parse date {value!r}: {e}")
            return None
    logging.warning(f"Unsupported date type: {type(value).__name__}")
    return None

def local_today():
    """Today's date in the local timezone."""
    return datetime.now(get_local_timezone()).date()

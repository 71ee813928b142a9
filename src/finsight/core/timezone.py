"""Timezone utilities for US/Eastern market time."""

from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser

EASTERN_TZ = pytz.timezone("US/Eastern")


def now_eastern() -> datetime:
    """Return current time in US/Eastern timezone."""
    return datetime.now(EASTERN_TZ)


def to_eastern(dt: datetime) -> datetime:
    """Convert a datetime to US/Eastern timezone."""
    if dt.tzinfo is None:
        # Naive datetimes are treated as Eastern wall-clock time
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def parse_datetime_eastern(
    value: Union[str, date, datetime],
    default_tz: Optional[pytz.BaseTzInfo] = None,
) -> datetime:
    """
    Parse a date/datetime (or ISO string) and return it in US/Eastern.

    Plain dates become midnight Eastern. Strings without an offset are
    interpreted in default_tz (Eastern when omitted).
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or EASTERN_TZ
        dt = tz.localize(dt)
    return to_eastern(dt)


def add_days(dt: datetime, days: int) -> datetime:
    """Shift a timestamp by whole calendar days, keeping the Eastern wall-clock."""
    local = to_eastern(dt).replace(tzinfo=None) + timedelta(days=days)
    return EASTERN_TZ.localize(local)


def to_naive_eastern(dt: datetime) -> datetime:
    """Eastern wall-clock without tzinfo, the form timestamps are stored in."""
    return to_eastern(dt).replace(tzinfo=None)

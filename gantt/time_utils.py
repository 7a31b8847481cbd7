"""
Time Utilities — canonical calendar days.

Every day-boundary decision in the engine (today, weekends, task dates,
month buckets) goes through this module so that one instant never lands
on two different days depending on the caller's locale.

Calendar days are plain `datetime.date` values interpreted in the canonical
timezone (config.TIMEZONE, Asia/Tokyo by default).
"""

import calendar
import logging
import re
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from . import config
from .errors import InvalidDateError

logger = logging.getLogger(__name__)

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Clock = Callable[[], datetime]


@lru_cache(maxsize=16)
def canonical_zone(tz: str | None = None) -> ZoneInfo:
    """Resolve an IANA zone name, defaulting to the configured canonical zone."""
    name = tz or config.TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Invalid timezone: {name}") from e


def _instant_to_day(value: datetime, tz: str | None) -> date:
    # Naive datetimes are stored instants without offset: treat as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(canonical_zone(tz)).date()


def parse_calendar_day(value: object, tz: str | None = None) -> date:
    """
    Convert a stored date-like value to a calendar day in the canonical zone.

    Accepts:
    - date: returned unchanged
    - datetime: aware values are converted; naive values are read as UTC
    - str: "2024-01-10" maps to that day; ISO datetimes (with "Z" or offset)
      are converted like datetimes
    - objects with a to_datetime() method (timestamp wrappers)

    Raises:
        InvalidDateError: If the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return _instant_to_day(value, tz)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidDateError(value)
        try:
            if DATE_ONLY_REGEX.match(text):
                return date.fromisoformat(text)
            return _instant_to_day(datetime.fromisoformat(text), tz)
        except ValueError as e:
            raise InvalidDateError(value) from e
    to_datetime = getattr(value, "to_datetime", None)
    if callable(to_datetime):
        converted = to_datetime()
        if isinstance(converted, datetime):
            return _instant_to_day(converted, tz)
    raise InvalidDateError(value)


def to_calendar_day(value: object, tz: str | None = None) -> date | None:
    """Lenient form of parse_calendar_day: missing or malformed values become None."""
    if value is None or value == "":
        return None
    try:
        return parse_calendar_day(value, tz)
    except InvalidDateError:
        logger.warning("Ignoring malformed date value %r", value)
        return None


def now_utc() -> datetime:
    return datetime.now(UTC)


def today_local(tz: str | None = None, clock: Clock | None = None) -> date:
    """Today in the canonical zone. `clock` is injectable for deterministic tests."""
    return _instant_to_day((clock or now_utc)(), tz)


# =============================================================================
# Calendar arithmetic
# =============================================================================


def days_between(later: date, earlier: date) -> int:
    """Whole days from `earlier` to `later` (negative when later precedes earlier)."""
    return (later - earlier).days


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def start_of_week(d: date) -> date:
    """Monday of the week containing d."""
    return d - timedelta(days=d.weekday())


def end_of_week(d: date) -> date:
    """Sunday of the week containing d."""
    return d + timedelta(days=6 - d.weekday())


def add_years(d: date, years: int) -> date:
    """Shift by whole years; Feb 29 rolls to Mar 1 in non-leap targets."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return date(d.year + years, 3, 1)


def add_months(d: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def is_weekend(d: date) -> bool:
    """Saturday or Sunday."""
    return d.weekday() >= 5

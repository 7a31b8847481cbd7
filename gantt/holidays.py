"""
Holiday Calendar: the `is_holiday(date) -> bool` collaborator of the grid.

Knows the Japanese national holidays (fixed days, Happy-Monday days,
equinoxes, substitute and citizens' holidays) and any organisation closures
listed under `holidays.extra` in config/gantt.yaml.

Lookups are pure: each year's holiday table is computed once and cached.
"""

import logging
import math
from datetime import date, timedelta
from pathlib import Path

from . import config

logger = logging.getLogger(__name__)

SUBSTITUTE_HOLIDAY = "Substitute Holiday"
CITIZENS_HOLIDAY = "Citizens' Holiday"

# (month, day, name)
_FIXED_HOLIDAYS = [
    (1, 1, "New Year's Day"),
    (2, 11, "National Foundation Day"),
    (2, 23, "Emperor's Birthday"),
    (4, 29, "Showa Day"),
    (5, 3, "Constitution Memorial Day"),
    (5, 4, "Greenery Day"),
    (5, 5, "Children's Day"),
    (11, 3, "Culture Day"),
    (11, 23, "Labour Thanksgiving Day"),
]

# Olympic years moved Marine/Sports/Mountain Day to fixed dates
_SPECIAL_YEARS = {
    2020: {"marine": (7, 23), "sports": (7, 24), "mountain": (8, 10)},
    2021: {"marine": (7, 22), "sports": (7, 23), "mountain": (8, 8)},
}


def nth_weekday_of_month(year: int, month: int, weekday: int, occurrence: int) -> int:
    """Day of month of the n-th given weekday (Monday=0)."""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return 1 + offset + 7 * (occurrence - 1)


def vernal_equinox_day(year: int) -> int:
    return math.floor(20.8431 + 0.242194 * (year - 1980)) - (year - 1980) // 4


def autumn_equinox_day(year: int) -> int:
    return math.floor(23.2488 + 0.242194 * (year - 1980)) - (year - 1980) // 4


def _add_substitute_holidays(holidays: dict[date, str]) -> None:
    # A holiday on Sunday moves the day off to the next non-holiday
    for day in sorted(holidays):
        if day.weekday() != 6:
            continue
        substitute = day + timedelta(days=1)
        while substitute in holidays:
            substitute += timedelta(days=1)
        holidays[substitute] = SUBSTITUTE_HOLIDAY


def _add_citizens_holidays(holidays: dict[date, str]) -> None:
    # A weekday sandwiched between two holidays is itself a holiday
    days = sorted(holidays)
    for current, following in zip(days, days[1:]):
        if (following - current).days != 2:
            continue
        middle = current + timedelta(days=1)
        if middle.weekday() >= 5 or middle in holidays:
            continue
        holidays[middle] = CITIZENS_HOLIDAY


def japanese_holidays(year: int) -> dict[date, str]:
    """All national holidays of `year` mapped to their names."""
    holidays: dict[date, str] = {}

    for month, day, name in _FIXED_HOLIDAYS:
        holidays[date(year, month, day)] = name

    special = _SPECIAL_YEARS.get(year)
    mountain = special["mountain"] if special else (8, 11)
    holidays[date(year, *mountain)] = "Mountain Day"

    holidays[date(year, 1, nth_weekday_of_month(year, 1, 0, 2))] = "Coming of Age Day"
    holidays[date(year, 9, nth_weekday_of_month(year, 9, 0, 3))] = "Respect for the Aged Day"

    if special:
        holidays[date(year, *special["marine"])] = "Marine Day"
        holidays[date(year, *special["sports"])] = "Sports Day"
    else:
        holidays[date(year, 7, nth_weekday_of_month(year, 7, 0, 3))] = "Marine Day"
        holidays[date(year, 10, nth_weekday_of_month(year, 10, 0, 2))] = "Sports Day"

    holidays[date(year, 3, vernal_equinox_day(year))] = "Vernal Equinox Day"
    holidays[date(year, 9, autumn_equinox_day(year))] = "Autumnal Equinox Day"

    _add_substitute_holidays(holidays)
    _add_citizens_holidays(holidays)
    return holidays


class HolidayCalendar:
    """
    Holiday lookup used by the calendar grid.

    Loads the `holidays` section of config/gantt.yaml. Falls back to the
    Japanese national calendar with no extra closures if the file is missing.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        settings: dict | None = None,
    ):
        if settings is None:
            settings = config.load_gantt_yaml(config_path).get("holidays") or {}

        self._national = str(settings.get("national_calendar", "japan")).lower() == "japan"
        self._extra: dict[date, str] = {}
        for entry in settings.get("extra") or []:
            try:
                self._extra[date.fromisoformat(str(entry["date"]))] = entry.get(
                    "name", "Organisation Holiday"
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed holiday entry: %r", entry)

        self._cache: dict[int, dict[date, str]] = {}

    def _year_table(self, year: int) -> dict[date, str]:
        table = self._cache.get(year)
        if table is None:
            table = japanese_holidays(year) if self._national else {}
            self._cache[year] = table
        return table

    def holiday_name(self, d: date) -> str | None:
        if d in self._extra:
            return self._extra[d]
        return self._year_table(d.year).get(d)

    def is_holiday(self, d: date) -> bool:
        return self.holiday_name(d) is not None

    def __call__(self, d: date) -> bool:
        return self.is_holiday(d)


def no_holidays(_: date) -> bool:
    return False

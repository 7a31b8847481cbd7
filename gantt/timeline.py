"""
Calendar Grid Builder.

Turns the set of dates relevant to the visible tasks into a contiguous,
week-aligned sequence of day descriptors plus a run-length month
segmentation. The grid always covers today ± WINDOW_YEARS and widens to
include every task date.

A Timeline is an immutable snapshot: filter changes build a new one from
scratch rather than mutating the current one.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from . import config
from .time_utils import (
    Clock,
    add_days,
    add_years,
    days_between,
    end_of_week,
    is_weekend,
    start_of_week,
    to_calendar_day,
    today_local,
)

logger = logging.getLogger(__name__)

HolidayLookup = Callable[[date], bool]


@dataclass(frozen=True)
class TimelineLabels:
    """Display labels for weekday and month headers."""

    weekdays: tuple[str, ...] = tuple(config.DEFAULT_WEEKDAY_LABELS)
    month_format: str = config.DEFAULT_MONTH_LABEL_FORMAT

    @classmethod
    def from_config(
        cls, settings: dict | None = None, config_path: Path | None = None
    ) -> "TimelineLabels":
        """Labels from the `labels` section of config/gantt.yaml, defaults otherwise."""
        if settings is None:
            settings = config.load_gantt_yaml(config_path).get("labels") or {}

        weekdays = settings.get("weekdays") or config.DEFAULT_WEEKDAY_LABELS
        if len(weekdays) != 7:
            logger.warning("labels.weekdays needs 7 entries, got %d; using defaults", len(weekdays))
            weekdays = config.DEFAULT_WEEKDAY_LABELS
        month_format = settings.get("month_format") or config.DEFAULT_MONTH_LABEL_FORMAT
        return cls(weekdays=tuple(str(w) for w in weekdays), month_format=str(month_format))

    def weekday(self, d: date) -> str:
        return self.weekdays[d.weekday()]

    def month(self, year: int, month: int) -> str:
        return self.month_format.format(year=year, month=month)

    def day(self, d: date) -> str:
        return f"{d.day:02d}"


@dataclass(frozen=True)
class TimelineDay:
    date: date
    is_weekend: bool
    is_holiday: bool
    is_today: bool
    day_label: str
    weekday_label: str

    @property
    def label(self) -> str:
        """Header text such as "08 (月)"."""
        return f"{self.day_label} ({self.weekday_label})"

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "is_weekend": self.is_weekend,
            "is_holiday": self.is_holiday,
            "is_today": self.is_today,
            "day_label": self.day_label,
            "weekday_label": self.weekday_label,
        }


@dataclass(frozen=True)
class MonthSegment:
    """A run of consecutive days in one (year, month)."""

    year: int
    month: int
    label: str
    span: int

    def to_dict(self) -> dict:
        return {"year": self.year, "month": self.month, "label": self.label, "span": self.span}


@dataclass(frozen=True)
class Timeline:
    """
    Timeline State.

    Invariants:
    - start is a Monday, end is a Sunday
    - days holds exactly one entry per calendar day in [start, end]
    - sum of month segment spans == len(days)
    - total_days == max(1, len(days))
    """

    start: date
    end: date
    today: date
    days: tuple[TimelineDay, ...]
    month_segments: tuple[MonthSegment, ...]
    total_days: int

    def day_offset(self, d: date) -> int:
        """Signed day distance from the grid start; may fall outside the grid."""
        return days_between(d, self.start)

    def clamp_index(self, index: int) -> int:
        return max(0, min(len(self.days) - 1, index))

    def index_of(self, d: date) -> int | None:
        offset = self.day_offset(d)
        if 0 <= offset < len(self.days):
            return offset
        return None

    def month_label_at(self, index: int) -> str:
        if not self.days:
            return ""
        index = self.clamp_index(index)
        for segment_start, segment in self._segment_starts():
            if index < segment_start + segment.span:
                return segment.label
        return self.month_segments[-1].label

    def _segment_starts(self):
        cursor = 0
        for segment in self.month_segments:
            yield cursor, segment
            cursor += segment.span

    def width_px(self, day_cell_width: float) -> float:
        return self.total_days * day_cell_width

    def to_dict(self) -> dict:
        return {
            "timeline_start": self.start.isoformat(),
            "timeline_end": self.end.isoformat(),
            "today": self.today.isoformat(),
            "total_days": self.total_days,
            "days": [d.to_dict() for d in self.days],
            "month_segments": [m.to_dict() for m in self.month_segments],
        }


def default_window(today: date, window_years: int) -> tuple[date, date]:
    """today ± window_years, snapped outward to whole Monday..Sunday weeks."""
    return (
        start_of_week(add_years(today, -window_years)),
        end_of_week(add_years(today, window_years)),
    )


def build_month_segments(days: Iterable[TimelineDay], labels: TimelineLabels) -> list[MonthSegment]:
    segments: list[MonthSegment] = []
    current_key: tuple[int, int] | None = None
    span = 0
    for day in days:
        key = (day.date.year, day.date.month)
        if key != current_key:
            if current_key is not None:
                segments.append(MonthSegment(*current_key, labels.month(*current_key), span))
            current_key = key
            span = 1
        else:
            span += 1
    if current_key is not None:
        segments.append(MonthSegment(*current_key, labels.month(*current_key), span))
    return segments


def build_timeline(
    dates: Iterable[date],
    today: date,
    is_holiday: HolidayLookup,
    labels: TimelineLabels | None = None,
    window_years: int = config.WINDOW_YEARS,
) -> Timeline:
    """
    Build the grid for a set of canonical calendar days.

    The result is the union of the default window and the week-snapped
    [min(dates), max(dates)] range. Identical inputs give equal Timelines.
    """
    labels = labels or TimelineLabels()
    start, end = default_window(today, window_years)

    relevant = list(dates)
    if relevant:
        start = min(start, start_of_week(min(relevant)))
        end = max(end, end_of_week(max(relevant)))

    days: list[TimelineDay] = []
    cursor = start
    while cursor <= end:
        days.append(
            TimelineDay(
                date=cursor,
                is_weekend=is_weekend(cursor),
                is_holiday=is_holiday(cursor),
                is_today=cursor == today,
                day_label=labels.day(cursor),
                weekday_label=labels.weekday(cursor),
            )
        )
        cursor = add_days(cursor, 1)

    return Timeline(
        start=start,
        end=end,
        today=today,
        days=tuple(days),
        month_segments=tuple(build_month_segments(days, labels)),
        total_days=max(1, len(days)),
    )


class TimelineBuilder:
    """
    Stateful front for build_timeline: owns the canonical timezone, the clock,
    the holiday lookup and labels, and normalizes raw input dates.
    """

    def __init__(
        self,
        is_holiday: HolidayLookup,
        labels: TimelineLabels | None = None,
        tz: str | None = None,
        window_years: int | None = None,
        clock: Clock | None = None,
    ):
        self._is_holiday = is_holiday
        self._labels = labels or TimelineLabels()
        self._tz = tz
        self._window_years = config.WINDOW_YEARS if window_years is None else window_years
        self._clock = clock

    @property
    def labels(self) -> TimelineLabels:
        return self._labels

    def today(self) -> date:
        return today_local(self._tz, self._clock)

    def build(self, dates: Iterable[object]) -> Timeline:
        normalized = [d for d in (to_calendar_day(v, self._tz) for v in dates) if d is not None]
        timeline = build_timeline(
            normalized,
            self.today(),
            self._is_holiday,
            labels=self._labels,
            window_years=self._window_years,
        )
        logger.debug(
            "Timeline built",
            extra={
                "timeline_start": timeline.start.isoformat(),
                "timeline_end": timeline.end.isoformat(),
                "total_days": timeline.total_days,
                "input_dates": len(normalized),
            },
        )
        return timeline

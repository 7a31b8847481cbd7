"""
Bar Positioning Engine.

Maps a task's effective [start, end] onto grid-relative percentages:

    offset = clamp(start - timeline.start, 0, total_days - 1) / total_days
    width  = clamp(end - start + 1, 1, total_days - offset_days) / total_days

A single date is used as both ends (one-day bar); a task without dates has
no bar (0%, 0%). Dates outside the grid clamp to the nearest edge, so
offset + width never exceeds 100%.
"""

from dataclasses import dataclass

from .models import Task
from .time_utils import days_between
from .timeline import Timeline


@dataclass(frozen=True)
class BarGeometry:
    offset_days: int
    duration_days: int
    offset_percent: float
    width_percent: float

    @property
    def visible(self) -> bool:
        return self.duration_days > 0

    def to_dict(self) -> dict:
        return {
            "offset_days": self.offset_days,
            "duration_days": self.duration_days,
            "offset_percent": self.offset_percent,
            "width_percent": self.width_percent,
        }


NO_BAR = BarGeometry(offset_days=0, duration_days=0, offset_percent=0.0, width_percent=0.0)


def clamped_offset_days(task: Task, timeline: Timeline) -> int | None:
    start = task.effective_start
    if start is None:
        return None
    return max(0, min(timeline.day_offset(start), max(0, timeline.total_days - 1)))


def bar_geometry(task: Task, timeline: Timeline) -> BarGeometry:
    start, end = task.effective_start, task.effective_end
    if start is None or end is None:
        return NO_BAR

    total = timeline.total_days
    offset_days = clamped_offset_days(task, timeline)
    duration = days_between(end, start) + 1
    max_duration = max(1, total - offset_days)
    clamped_duration = min(max(1, duration), max_duration)

    offset_percent = offset_days / total * 100
    width_percent = max(clamped_duration / total * 100, 1 / total * 100)
    # float rounding must not push the right edge past 100%
    width_percent = min(width_percent, 100.0 - offset_percent)
    return BarGeometry(
        offset_days=offset_days,
        duration_days=clamped_duration,
        offset_percent=offset_percent,
        width_percent=width_percent,
    )


def task_day_range(task: Task, timeline: Timeline) -> tuple[int, int] | None:
    """
    Day indices [start, end] the task covers on the grid, clamped to it.

    Uses the same effective-bounds substitution as bar_geometry.
    """
    if not timeline.days:
        return None
    start, end = task.effective_start, task.effective_end
    if start is None or end is None:
        return None
    start_index = timeline.clamp_index(timeline.day_offset(start))
    end_index = max(start_index, timeline.clamp_index(timeline.day_offset(end)))
    return start_index, end_index

"""
Tests for the Bar Positioning Engine.
"""

from datetime import date

import pytest

from gantt.bars import NO_BAR, bar_geometry, task_day_range
from gantt.holidays import no_holidays
from gantt.models import Task
from gantt.timeline import build_timeline

TODAY = date(2024, 1, 10)


def _task(start=None, end=None, task_id="t1") -> Task:
    return Task(id=task_id, project_id="p1", issue_id="i1", title="x", start_date=start, end_date=end)


@pytest.fixture
def week_grid():
    # 2024-01-08 (Mon) .. 2024-01-14 (Sun)
    return build_timeline([], TODAY, no_holidays, window_years=0)


class TestBarGeometry:
    def test_three_day_task(self, week_grid):
        geometry = bar_geometry(_task(date(2024, 1, 10), date(2024, 1, 12)), week_grid)
        total = week_grid.total_days
        assert geometry.offset_days == 2
        assert geometry.duration_days == 3
        assert geometry.offset_percent == 2 / total * 100
        assert geometry.width_percent == 3 / total * 100

    def test_three_day_task_on_default_window(self):
        timeline = build_timeline([date(2024, 1, 10), date(2024, 1, 12)], TODAY, no_holidays)
        geometry = bar_geometry(_task(date(2024, 1, 10), date(2024, 1, 12)), timeline)
        assert geometry.offset_days == timeline.day_offset(date(2024, 1, 10))
        assert geometry.duration_days == 3

    def test_end_date_only_is_one_day_bar(self):
        end = date(2024, 6, 1)
        timeline = build_timeline([end], TODAY, no_holidays, window_years=0)
        geometry = bar_geometry(_task(end=end), timeline)
        total = timeline.total_days
        assert geometry.offset_days == timeline.day_offset(end)
        assert geometry.duration_days == 1
        assert geometry.offset_percent == timeline.day_offset(end) / total * 100
        assert geometry.width_percent == 1 / total * 100

    def test_start_date_only_is_one_day_bar(self, week_grid):
        geometry = bar_geometry(_task(start=date(2024, 1, 9)), week_grid)
        assert (geometry.offset_days, geometry.duration_days) == (1, 1)

    def test_no_dates_no_bar(self, week_grid):
        geometry = bar_geometry(_task(), week_grid)
        assert geometry == NO_BAR
        assert geometry.visible is False
        assert geometry.offset_percent == 0.0
        assert geometry.width_percent == 0.0

    def test_end_before_start_is_minimum_width(self, week_grid):
        geometry = bar_geometry(_task(date(2024, 1, 12), date(2024, 1, 10)), week_grid)
        assert geometry.duration_days == 1
        assert geometry.width_percent == 1 / week_grid.total_days * 100


class TestClamping:
    def test_start_before_grid_clamps_to_zero(self, week_grid):
        geometry = bar_geometry(_task(date(2023, 12, 1), date(2024, 1, 9)), week_grid)
        assert geometry.offset_days == 0
        assert geometry.offset_percent == 0.0

    def test_end_after_grid_clamps_width(self, week_grid):
        geometry = bar_geometry(_task(date(2024, 1, 12), date(2024, 3, 1)), week_grid)
        assert geometry.offset_days == 4
        assert geometry.duration_days == 3
        assert geometry.offset_percent + geometry.width_percent == pytest.approx(100.0)

    def test_task_after_grid_sits_on_last_day(self, week_grid):
        geometry = bar_geometry(_task(date(2025, 1, 1), date(2025, 1, 5)), week_grid)
        assert geometry.offset_days == 6
        assert geometry.duration_days == 1

    def test_whole_grid_task(self, week_grid):
        geometry = bar_geometry(_task(date(2024, 1, 8), date(2024, 1, 14)), week_grid)
        assert geometry.offset_percent == 0.0
        assert geometry.width_percent == 7 / 7 * 100

    def test_right_edge_never_exceeds_100_percent(self):
        grid = build_timeline([], TODAY, no_holidays, window_years=5)
        past_end = date.fromordinal(grid.end.toordinal() + 30)
        for k in range(grid.total_days):
            start = date.fromordinal(grid.start.toordinal() + k)
            geometry = bar_geometry(_task(start, past_end), grid)
            assert geometry.offset_percent + geometry.width_percent <= 100.0, k


class TestDayRange:
    def test_day_range(self, week_grid):
        assert task_day_range(_task(date(2024, 1, 10), date(2024, 1, 12)), week_grid) == (2, 4)
        assert task_day_range(_task(end=date(2024, 1, 9)), week_grid) == (1, 1)
        assert task_day_range(_task(), week_grid) is None

    def test_day_range_clamped(self, week_grid):
        assert task_day_range(_task(date(2023, 1, 1), date(2030, 1, 1)), week_grid) == (0, 6)
        # Reversed bounds never produce an inverted range
        assert task_day_range(_task(date(2024, 1, 12), date(2024, 1, 10)), week_grid) == (4, 4)

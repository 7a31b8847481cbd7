"""
Tests for the Hierarchy Assembler: tree building, visibility and focus date.
"""

from datetime import date

from conftest import make_task

from gantt.hierarchy import (
    IssueGroup,
    build_project_hierarchy,
    collect_task_dates,
    filter_visible_groups,
    find_focus_date,
    find_group,
    is_group_visible,
    merge_task,
    toggle_collapsed,
)
from gantt.models import Issue, Project


def _row(project_id, issue_id, tasks=()):
    return IssueGroup(
        project=Project(id=project_id, name=f"Project {project_id}"),
        issue=Issue(id=issue_id, project_id=project_id, name=f"Issue {issue_id}"),
        tasks=tuple(tasks),
    )


class TestBuildHierarchy:
    def test_groups_issues_under_projects_in_order(self):
        rows = [_row("p2", "a"), _row("p1", "b"), _row("p2", "c")]
        tree = build_project_hierarchy(rows)
        assert [g.project.id for g in tree] == ["p2", "p1"]
        assert [pi.issue.id for pi in tree[0].issues] == ["a", "c"]

    def test_rows_without_ids_dropped(self, caplog):
        rows = [_row(None, "a"), _row("p1", None), _row("p1", "b")]
        tree = build_project_hierarchy(rows)
        assert len(tree) == 1
        assert [pi.issue.id for pi in tree[0].issues] == ["b"]
        assert "without ids" in caplog.text

    def test_to_dict(self):
        tree = build_project_hierarchy([_row("p1", "a", [make_task("t1")])])
        d = tree[0].to_dict()
        assert d["project"]["id"] == "p1"
        assert d["issues"][0]["tasks"][0]["id"] == "t1"


class TestVisibility:
    def test_no_filter_shows_all(self, groups):
        assert filter_visible_groups(groups, None) == groups
        assert filter_visible_groups(groups, "") == groups

    def test_filter_by_project(self, groups):
        visible = filter_visible_groups(groups, "p2")
        assert [g.project.id for g in visible] == ["p2"]

    def test_unknown_project_shows_nothing(self, groups):
        assert filter_visible_groups(groups, "nope") == ()

    def test_row_without_project_id(self):
        row = _row(None, "a")
        assert is_group_visible(row, None) is True
        assert is_group_visible(row, "p1") is False


class TestTaskDates:
    def test_collects_start_and_end(self, groups):
        assert collect_task_dates(groups) == [
            date(2024, 1, 10),
            date(2024, 1, 12),
            date(2024, 6, 1),
            date(2024, 3, 4),
            date(2024, 3, 8),
        ]

    def test_rows_without_ids_contribute_nothing(self):
        row = _row(None, "a", [make_task("t1", start=date(2030, 1, 1))])
        assert collect_task_dates([row]) == []


class TestFocusDate:
    def test_first_full_period_wins(self):
        rows = [
            _row("p1", "a", [make_task("t1", end=date(2024, 2, 1))]),
            _row("p1", "b", [make_task("t2", start=date(2024, 5, 1), end=date(2024, 5, 3))]),
        ]
        assert find_focus_date(rows) == date(2024, 5, 1)

    def test_single_date_fallback(self):
        rows = [_row("p1", "a", [make_task("t0"), make_task("t1", end=date(2024, 2, 1))])]
        assert find_focus_date(rows) == date(2024, 2, 1)

    def test_no_dates(self):
        assert find_focus_date([_row("p1", "a", [make_task("t0")])]) is None
        assert find_focus_date([]) is None

    def test_rows_without_ids_skipped(self):
        rows = [
            _row(None, "a", [make_task("t1", start=date(2030, 1, 1), end=date(2030, 1, 5))]),
            _row("p1", "b", [make_task("t2", end=date(2024, 2, 1))]),
        ]
        assert find_focus_date(rows) == date(2024, 2, 1)


class TestRowEdits:
    def test_find_group(self, groups):
        assert find_group(groups, "p2", "i2") is groups[1]
        assert find_group(groups, "p2", None) is None
        assert find_group(groups, "p9", "i9") is None

    def test_merge_task_replaces_by_id(self, groups):
        edited = make_task("t1", start=date(2024, 1, 15), end=date(2024, 1, 20), title="Edited")
        merged = merge_task(groups, edited)
        assert merged[0].find_task("t1").title == "Edited"
        assert merged[1] is groups[1]

    def test_merge_unknown_task_is_noop(self, groups):
        merged = merge_task(groups, make_task("t99"))
        assert merged == groups

    def test_toggle_collapsed(self, groups):
        toggled = toggle_collapsed(groups, ("p1", "i1"))
        assert toggled[0].collapsed is True
        assert toggled[1].collapsed is False
        assert toggle_collapsed(toggled, ("p1", "i1"))[0].collapsed is False

    def test_row_dict_includes_task_theme(self, groups):
        row = groups[0].to_dict()
        assert row["tasks"][0]["theme"] == groups[0].issue.theme()

    def test_row_dict_includes_issue_colours(self):
        row = IssueGroup(
            project=Project(id="p1", name="Website relaunch"),
            issue=Issue(id="i1", project_id="p1", name="Design", theme_color="#000000"),
        ).to_dict()
        assert row["theme"] == "#000000"
        assert row["surface_color"] == "#D1D1D1"
        assert row["overlay_color"] == "rgba(0, 0, 0, 0.18)"

"""
Hierarchy Assembler.

Groups flat (project, issue, tasks) rows into a project → issue → task tree
and derives the "visible" rows for an optional project filter.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date

from .models import Issue, Project, Task
from .theme import (
    ISSUE_OVERLAY_ALPHA,
    ISSUE_SURFACE_TINT,
    tint_theme_color,
    transparentize_theme_color,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueGroup:
    """One issue row of the Gantt with its tasks."""

    project: Project
    issue: Issue
    tasks: tuple[Task, ...] = field(default_factory=tuple)
    collapsed: bool = False

    @property
    def has_ids(self) -> bool:
        return bool(self.project.id and self.issue.id)

    @property
    def key(self) -> tuple[str | None, str | None]:
        return self.project.id, self.issue.id

    def find_task(self, task_id: str | None) -> Task | None:
        if not task_id:
            return None
        return next((t for t in self.tasks if t.id == task_id), None)

    def to_dict(self) -> dict:
        theme = self.issue.theme()
        return {
            "project": self.project.to_dict(),
            "issue": self.issue.to_dict(),
            "collapsed": self.collapsed,
            "theme": theme,
            "surface_color": tint_theme_color(theme, ISSUE_SURFACE_TINT),
            "overlay_color": transparentize_theme_color(theme, ISSUE_OVERLAY_ALPHA),
            "tasks": [
                {**t.to_dict(), "theme": t.theme(self.issue)} for t in self.tasks
            ],
        }


@dataclass(frozen=True)
class ProjectIssue:
    issue: Issue
    tasks: tuple[Task, ...]


@dataclass(frozen=True)
class ProjectGroup:
    project: Project
    issues: tuple[ProjectIssue, ...]

    def to_dict(self) -> dict:
        return {
            "project": self.project.to_dict(),
            "issues": [
                {
                    "issue": pi.issue.to_dict(),
                    "tasks": [t.to_dict() for t in pi.tasks],
                }
                for pi in self.issues
            ],
        }


def build_project_hierarchy(groups: Iterable[IssueGroup]) -> tuple[ProjectGroup, ...]:
    """
    Nest issue rows under their projects, keeping first-seen project order.

    Rows lacking a project or issue id are dropped (logged, not fatal).
    """
    projects: dict[str, Project] = {}
    issues_by_project: dict[str, list[ProjectIssue]] = {}
    for group in groups:
        if not group.has_ids:
            logger.warning(
                "Dropping issue row without ids from hierarchy",
                extra={"project_id": group.project.id, "issue_id": group.issue.id},
            )
            continue
        project_id = group.project.id
        if project_id not in projects:
            projects[project_id] = group.project
            issues_by_project[project_id] = []
        issues_by_project[project_id].append(ProjectIssue(group.issue, group.tasks))

    return tuple(
        ProjectGroup(project, tuple(issues_by_project[pid])) for pid, project in projects.items()
    )


def is_group_visible(group: IssueGroup, selected_project_id: str | None) -> bool:
    """
    All rows are visible without a filter; otherwise only the filtered project.

    A row whose project has no id is visible only when no filter is active.
    """
    if not group.project.id:
        return not selected_project_id
    if not selected_project_id:
        return True
    return group.project.id == selected_project_id


def filter_visible_groups(
    groups: Iterable[IssueGroup], selected_project_id: str | None
) -> tuple[IssueGroup, ...]:
    return tuple(g for g in groups if is_group_visible(g, selected_project_id))


def collect_task_dates(groups: Iterable[IssueGroup]) -> list[date]:
    """
    Every start/end date of the tasks in identified rows.

    Rows lacking project/issue ids contribute no dates to the grid.
    """
    dates: list[date] = []
    for group in groups:
        if not group.has_ids:
            continue
        for task in group.tasks:
            if task.start_date is not None:
                dates.append(task.start_date)
            if task.end_date is not None:
                dates.append(task.end_date)
    return dates


def find_focus_date(groups: Iterable[IssueGroup]) -> date | None:
    """
    Date to auto-scroll to after a filter change.

    Tasks of identified rows are scanned in row order. The first task with a
    full period wins (its start date); failing that, the first task with a
    single date. Rows without ids are skipped, as in collect_task_dates.
    """
    tasks = [task for group in groups if group.has_ids for task in group.tasks]
    for task in tasks:
        if task.has_period:
            return task.start_date
    for task in tasks:
        if task.effective_start is not None:
            return task.effective_start
    return None


def find_group(
    groups: Sequence[IssueGroup], project_id: str | None, issue_id: str | None
) -> IssueGroup | None:
    if not project_id or not issue_id:
        return None
    return next(
        (g for g in groups if g.has_ids and g.project.id == project_id and g.issue.id == issue_id),
        None,
    )


def merge_task(groups: Sequence[IssueGroup], updated: Task) -> tuple[IssueGroup, ...]:
    """
    Replace the stored copy of `updated` (matched by id within its project/issue).

    Returns new row tuples; rows that do not hold the task are reused as-is.
    """
    if not updated.id:
        return tuple(groups)

    merged: list[IssueGroup] = []
    for group in groups:
        if (
            group.has_ids
            and group.project.id == updated.project_id
            and group.issue.id == updated.issue_id
            and group.find_task(updated.id) is not None
        ):
            tasks = tuple(updated if t.id == updated.id else t for t in group.tasks)
            group = replace(group, tasks=tasks)
        merged.append(group)
    return tuple(merged)


def toggle_collapsed(groups: Sequence[IssueGroup], key: tuple[str | None, str | None]):
    return tuple(replace(g, collapsed=not g.collapsed) if g.key == key else g for g in groups)

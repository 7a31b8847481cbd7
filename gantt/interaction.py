"""
Interaction / Highlight State.

Hover and selection are an immutable InteractionState; every transition is
a pure function returning a new state.

Rules:
- hovered day and hovered task are mutually exclusive
- a selection is the (task, issue, project) triple, all or nothing
"""

from dataclasses import dataclass, replace

from .bars import task_day_range
from .hierarchy import IssueGroup
from .models import Issue, Project, Task, same_task
from .timeline import Timeline


@dataclass(frozen=True)
class InteractionState:
    hovered_day_index: int | None = None
    hovered_task: Task | None = None
    hovered_task_range: tuple[int, int] | None = None
    selected_task: Task | None = None
    selected_issue: Issue | None = None
    selected_project: Project | None = None

    @property
    def has_selection(self) -> bool:
        return self.selected_task is not None

    def to_dict(self) -> dict:
        return {
            "hovered_day_index": self.hovered_day_index,
            "hovered_task_id": self.hovered_task.id if self.hovered_task else None,
            "hovered_task_range": list(self.hovered_task_range) if self.hovered_task_range else None,
            "selected_task": self.selected_task.to_dict() if self.selected_task else None,
            "selected_issue": self.selected_issue.to_dict() if self.selected_issue else None,
            "selected_project": self.selected_project.to_dict() if self.selected_project else None,
        }


def hover_day(state: InteractionState, index: int | None) -> InteractionState:
    if index is None:
        return replace(state, hovered_day_index=None)
    return replace(state, hovered_day_index=index, hovered_task=None, hovered_task_range=None)


def hover_task(state: InteractionState, task: Task | None, timeline: Timeline | None) -> InteractionState:
    if task is None:
        return replace(state, hovered_task=None, hovered_task_range=None)
    day_range = task_day_range(task, timeline) if timeline is not None else None
    return replace(state, hovered_task=task, hovered_task_range=day_range, hovered_day_index=None)


def clear_hover(state: InteractionState) -> InteractionState:
    return replace(state, hovered_day_index=None, hovered_task=None, hovered_task_range=None)


def is_day_highlighted(state: InteractionState, index: int) -> bool:
    if state.hovered_day_index == index:
        return True
    if state.hovered_task_range is not None:
        start, end = state.hovered_task_range
        return start <= index <= end
    return False


def is_task_highlighted(state: InteractionState, task: Task, timeline: Timeline | None) -> bool:
    """The hovered task itself, or any task spanning the hovered day."""
    if same_task(state.hovered_task, task):
        return True
    if state.hovered_day_index is None or timeline is None:
        return False
    day_range = task_day_range(task, timeline)
    if day_range is None:
        return False
    return day_range[0] <= state.hovered_day_index <= day_range[1]


def select_task(state: InteractionState, group: IssueGroup, task: Task) -> InteractionState:
    """Set the selection triple. Navigation is a separate explicit action."""
    return replace(
        state,
        selected_task=task,
        selected_issue=group.issue,
        selected_project=group.project,
    )


def clear_selection(state: InteractionState) -> InteractionState:
    return replace(state, selected_task=None, selected_issue=None, selected_project=None)


def is_selection_visible(state: InteractionState, groups: tuple[IssueGroup, ...]) -> bool:
    """True when every part of the selection triple resolves inside `groups`."""
    task = state.selected_task
    if task is None or not task.id:
        return False
    project_id = state.selected_project.id if state.selected_project else None
    issue_id = state.selected_issue.id if state.selected_issue else None
    return any(
        g.has_ids
        and g.project.id == project_id
        and g.issue.id == issue_id
        and g.find_task(task.id) is not None
        for g in groups
    )


def ensure_selection_visible(
    state: InteractionState, groups: tuple[IssueGroup, ...]
) -> InteractionState:
    """
    Re-validate the selection after filtering.

    A selection that no longer resolves in the visible rows is cleared along
    with any hover; a still-visible selection is left untouched.
    """
    if state.selected_task is None:
        return state
    if is_selection_visible(state, groups):
        return state
    return clear_hover(clear_selection(state))


def revalidate_hover(
    state: InteractionState, groups: tuple[IssueGroup, ...], timeline: Timeline | None
) -> InteractionState:
    """
    Recompute hover against rebuilt rows and grid.

    A hovered task is looked up again by id: if still visible its day range
    is recomputed from its current dates, otherwise the hover is dropped.
    A hovered day past the end of the grid is dropped.
    """
    if state.hovered_task is not None:
        task_id = state.hovered_task.id
        for group in groups:
            current = group.find_task(task_id)
            if current is not None:
                return hover_task(state, current, timeline)
        return clear_hover(state)
    index = state.hovered_day_index
    if index is not None and (timeline is None or index >= len(timeline.days)):
        return replace(state, hovered_day_index=None)
    return state


def refresh_selected_task(state: InteractionState, updated: Task) -> InteractionState:
    """Swap in an edited copy of the selected task."""
    if not same_task(state.selected_task, updated):
        return state
    return replace(state, selected_task=updated)

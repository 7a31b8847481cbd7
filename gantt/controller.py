"""
Gantt controller: the single state holder the view layer talks to.

Data flow on every load or filter change:

    source rows → hierarchy + visible rows → calendar grid (from the visible
    tasks' dates) → scroll decision for the new grid

Timeline, hierarchy and interaction state are replaced wholesale on each
transition and announced on the StateBus, so a subscriber always reads a
consistent snapshot.
"""

import logging
from collections.abc import Callable
from datetime import date
from urllib.parse import quote

from . import config
from .bars import NO_BAR, BarGeometry, bar_geometry
from .errors import LoadError
from .events import (
    HIERARCHY_CHANGED,
    INTERACTION_CHANGED,
    LOAD_FAILED,
    MONTH_LABEL_CHANGED,
    NAVIGATE,
    SCROLL_APPLIED,
    TIMELINE_REBUILT,
    StateBus,
)
from .hierarchy import (
    IssueGroup,
    ProjectGroup,
    build_project_hierarchy,
    collect_task_dates,
    filter_visible_groups,
    find_focus_date,
    find_group,
    merge_task,
    toggle_collapsed,
)
from .holidays import HolidayCalendar
from .interaction import (
    InteractionState,
    clear_selection,
    ensure_selection_visible,
    refresh_selected_task,
    revalidate_hover,
)
from .interaction import hover_day as _hover_day
from .interaction import hover_task as _hover_task
from .interaction import is_day_highlighted as _is_day_highlighted
from .interaction import is_task_highlighted as _is_task_highlighted
from .interaction import select_task as _select_task
from .models import Issue, Project, Task
from .persistence import KeyValueStore, MemoryKeyValueStore, ViewportStateStore
from .scroll import ScrollCommand, ScrollCoordinator, ViewportMetrics
from .sources import ProjectSource, load_groups, normalize_task_dates
from .time_utils import Clock
from .timeline import HolidayLookup, Timeline, TimelineBuilder, TimelineLabels

logger = logging.getLogger(__name__)

Navigator = Callable[[str, str, str], None]


def detail_route(project_id: str, issue_id: str, task_id: str) -> str:
    """Route of the issue page with the task focused."""
    return (
        f"/projects/{quote(project_id, safe='')}/issues/{quote(issue_id, safe='')}"
        f"?focus={quote(task_id, safe='')}"
    )


class GanttController:
    def __init__(
        self,
        source: ProjectSource,
        store: KeyValueStore | None = None,
        is_holiday: HolidayLookup | None = None,
        labels: TimelineLabels | None = None,
        tz: str | None = None,
        clock: Clock | None = None,
        day_cell_width: float = config.DAY_CELL_WIDTH,
        window_years: int | None = None,
        navigator: Navigator | None = None,
        bus: StateBus | None = None,
    ):
        self.source = source
        self.tz = tz or config.TIMEZONE
        self.bus = bus or StateBus()
        self._navigator = navigator
        self._builder = TimelineBuilder(
            is_holiday=is_holiday or HolidayCalendar(),
            labels=labels or TimelineLabels.from_config(),
            tz=self.tz,
            window_years=window_years,
            clock=clock,
        )
        self.scroll = ScrollCoordinator(
            ViewportStateStore(store if store is not None else MemoryKeyValueStore()),
            day_cell_width=day_cell_width,
            on_scroll=self._on_scroll_applied,
            on_month_label=self._on_month_label,
        )

        self.loading = False
        self.load_error: str | None = None
        self.available_projects: list[Project] = []
        self.groups: tuple[IssueGroup, ...] = ()
        self.visible_groups: tuple[IssueGroup, ...] = ()
        self.hierarchy: tuple[ProjectGroup, ...] = ()
        self.timeline: Timeline | None = None
        self.interaction = InteractionState()

    # -------------------------------------------------------------------------
    # Loading / filtering
    # -------------------------------------------------------------------------

    @property
    def selected_project_id(self) -> str | None:
        return self.scroll.selected_project_id

    @property
    def show_project_selection_hint(self) -> bool:
        return not self.selected_project_id and bool(self.available_projects)

    async def load(self) -> bool:
        """
        (Re)load all rows from the source.

        On failure the previous hierarchy and grid stay in place and
        load_error is set. Returns True on success.
        """
        self.loading = True
        self.load_error = None
        try:
            projects, groups = await load_groups(self.source, self.tz)
        except LoadError as e:
            logger.error("Gantt data load failed: %s", e)
            self.load_error = str(e)
            self.bus.publish(LOAD_FAILED, error=self.load_error)
            return False
        finally:
            self.loading = False

        self.groups = groups
        self.hierarchy = build_project_hierarchy(groups)
        self._initialize_project_selection(projects)
        self._apply_filters(focus=True)
        return True

    def _initialize_project_selection(self, projects: list[Project]) -> None:
        # A restored filter for a project that is gone falls back to "all"
        self.available_projects = list(projects)
        previous = self.selected_project_id
        if previous and not any(p.id == previous for p in projects):
            logger.info("Restored project filter %s no longer available; clearing", previous)
            previous = None
        self.scroll.set_selected_project(previous)

    def select_project_filter(self, project_id: str | None) -> None:
        normalized = project_id.strip() if isinstance(project_id, str) else ""
        self.scroll.set_selected_project(normalized or None)
        self._apply_filters(focus=True)

    def _apply_filters(self, focus: bool) -> None:
        visible = filter_visible_groups(self.groups, self.selected_project_id)
        self.visible_groups = visible

        dates = collect_task_dates(visible)
        focus_date = find_focus_date(visible) if focus else None
        self.timeline = self._builder.build(dates)

        interaction = ensure_selection_visible(self.interaction, visible)
        self._set_interaction(revalidate_hover(interaction, visible, self.timeline))

        self.bus.publish(
            HIERARCHY_CHANGED,
            selected_project_id=self.selected_project_id,
            visible_rows=len(visible),
        )
        self.bus.publish(
            TIMELINE_REBUILT,
            timeline_start=self.timeline.start.isoformat(),
            timeline_end=self.timeline.end.isoformat(),
            total_days=self.timeline.total_days,
        )
        self.scroll.grid_rebuilt(self.timeline, has_dates=bool(dates), focus_date=focus_date)

    def update_task(self, task: Task) -> None:
        """Merge an edited task into the rows and the selection; keeps the scroll offset."""
        task = normalize_task_dates(task, self.tz)
        self.groups = merge_task(self.groups, task)
        self.hierarchy = build_project_hierarchy(self.groups)
        self._set_interaction(refresh_selected_task(self.interaction, task))
        self._apply_filters(focus=False)

    def toggle_issue(self, project_id: str, issue_id: str) -> None:
        self.groups = toggle_collapsed(self.groups, (project_id, issue_id))
        self.visible_groups = filter_visible_groups(self.groups, self.selected_project_id)
        self.bus.publish(HIERARCHY_CHANGED, selected_project_id=self.selected_project_id)

    # -------------------------------------------------------------------------
    # Geometry / highlight queries
    # -------------------------------------------------------------------------

    def task_geometry(self, task: Task) -> BarGeometry:
        if self.timeline is None:
            return NO_BAR
        return bar_geometry(task, self.timeline)

    def is_day_highlighted(self, index: int) -> bool:
        return _is_day_highlighted(self.interaction, index)

    def is_task_highlighted(self, task: Task) -> bool:
        return _is_task_highlighted(self.interaction, task, self.timeline)

    def find_task(self, task_id: str) -> tuple[IssueGroup, Task] | None:
        for group in self.visible_groups:
            task = group.find_task(task_id)
            if task is not None:
                return group, task
        return None

    # -------------------------------------------------------------------------
    # Hover / selection
    # -------------------------------------------------------------------------

    def _set_interaction(self, state: InteractionState) -> None:
        if state != self.interaction:
            self.interaction = state
            self.bus.publish(INTERACTION_CHANGED, **state.to_dict())

    def hover_day(self, index: int | None) -> None:
        self._set_interaction(_hover_day(self.interaction, index))

    def hover_task(self, task: Task | None) -> None:
        self._set_interaction(_hover_task(self.interaction, task, self.timeline))

    def select_task(self, group: IssueGroup, task: Task) -> None:
        self._set_interaction(_select_task(self.interaction, group, task))

    def select_sidebar_task(self, project_id: str | None, issue_id: str | None, task: Task) -> bool:
        """Select from the tree sidebar and scroll the task's start into view."""
        group = find_group(self.groups, project_id, issue_id)
        if group is None:
            return False
        self.select_task(group, task)
        self.focus_task(task)
        return True

    def focus_task(self, task: Task) -> ScrollCommand | None:
        start = task.effective_start
        if self.timeline is None or start is None:
            return None
        return self.scroll.focus_day_index(self.timeline.day_offset(start))

    def close_detail_panel(self) -> None:
        self._set_interaction(clear_selection(self.interaction))

    def go_to_task_detail(
        self,
        task: Task | None = None,
        issue: Issue | None = None,
        project: Project | None = None,
    ) -> str | None:
        """
        Navigate to the task's issue page; explicit arguments override the
        current selection. Returns the route, or None if any id is missing.
        """
        task = task or self.interaction.selected_task
        issue = issue or self.interaction.selected_issue
        project = project or self.interaction.selected_project
        if not (task and task.id and issue and issue.id and project and project.id):
            return None

        route = detail_route(project.id, issue.id, task.id)
        self.bus.publish(NAVIGATE, route=route, project_id=project.id, issue_id=issue.id, task_id=task.id)
        if self._navigator is not None:
            try:
                self._navigator(project.id, issue.id, task.id)
            except Exception:
                logger.exception("Navigation to %s failed", route)
        return route

    # -------------------------------------------------------------------------
    # Viewport
    # -------------------------------------------------------------------------

    def _on_scroll_applied(self, command: ScrollCommand) -> None:
        self.bus.publish(SCROLL_APPLIED, **command.to_dict())

    def _on_month_label(self, label: str) -> None:
        self.bus.publish(MONTH_LABEL_CHANGED, label=label)

    @property
    def active_month_label(self) -> str:
        return self.scroll.active_month_label

    def mount(self, client_width: float, scroll_width: float | None = None) -> ScrollCommand | None:
        return self.scroll.mount(ViewportMetrics(client_width, scroll_width))

    def view_ready(
        self, client_width: float | None = None, scroll_width: float | None = None
    ) -> ScrollCommand | None:
        metrics = ViewportMetrics(client_width, scroll_width) if client_width is not None else None
        return self.scroll.view_ready(metrics)

    def on_user_scroll(self, scroll_left: float) -> None:
        self.scroll.on_user_scroll(scroll_left)

    def scroll_by_weeks(self, weeks: int) -> ScrollCommand | None:
        return self.scroll.scroll_by_weeks(weeks)

    def scroll_by_months(self, months: int) -> ScrollCommand | None:
        return self.scroll.scroll_by_months(months)

    def scroll_to_today(self) -> ScrollCommand | None:
        return self.scroll.scroll_to_today()

    def scroll_to_date(self, target: date) -> ScrollCommand | None:
        return self.scroll.scroll_to_date(target)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def rows_to_dict(self) -> list[dict]:
        rows = []
        for group in self.visible_groups:
            row = group.to_dict()
            for task_dict, task in zip(row["tasks"], group.tasks):
                task_dict["bar"] = self.task_geometry(task).to_dict()
                task_dict["highlighted"] = self.is_task_highlighted(task)
            rows.append(row)
        return rows

    def to_dict(self) -> dict:
        return {
            "loading": self.loading,
            "load_error": self.load_error,
            "selected_project_id": self.selected_project_id,
            "show_project_selection_hint": self.show_project_selection_hint,
            "available_projects": [p.to_dict() for p in self.available_projects],
            "interaction": self.interaction.to_dict(),
            "viewport": self.scroll.to_dict(),
        }

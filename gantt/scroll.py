"""
Viewport Scroll Coordinator.

Resolves the ordering between "grid rebuilt", "view mounted" and "restore
persisted scroll / jump to today / jump to a task's date".

States:
    UNMOUNTED        the view cannot scroll yet; requests wait
    MOUNTED_IDLE     mounted, nothing queued
    MOUNTED_PENDING  mounted, a ScrollRequest waits for the next view-ready

Scrolling is a two-phase commit. A grid rebuild only decides *what* to
scroll to and queues it; the request is applied when the view reports that
it has rendered the new grid (mount() or view_ready()), because the pixel
target depends on the width of that grid. A newer request overwrites a
queued one, requests are never stacked.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from . import config
from .persistence import ViewportState, ViewportStateStore
from .time_utils import add_months, start_of_month
from .timeline import Timeline

logger = logging.getLogger(__name__)


class ScrollPhase(Enum):
    UNMOUNTED = "unmounted"
    MOUNTED_IDLE = "mounted_idle"
    MOUNTED_PENDING = "mounted_pending"


class ScrollKind(Enum):
    OFFSET = "offset"
    TODAY = "today"
    DATE = "date"


@dataclass(frozen=True)
class ScrollRequest:
    kind: ScrollKind
    offset: float | None = None
    target_date: date | None = None
    smooth: bool = False

    @classmethod
    def to_offset(cls, offset: float) -> "ScrollRequest":
        return cls(ScrollKind.OFFSET, offset=offset)

    @classmethod
    def to_today(cls, smooth: bool = False) -> "ScrollRequest":
        return cls(ScrollKind.TODAY, smooth=smooth)

    @classmethod
    def to_date(cls, target_date: date, smooth: bool = True) -> "ScrollRequest":
        return cls(ScrollKind.DATE, target_date=target_date, smooth=smooth)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "offset": self.offset,
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "smooth": self.smooth,
        }


@dataclass(frozen=True)
class ViewportMetrics:
    """
    What the view reports about its scroll container.

    scroll_width defaults to the grid width (total_days * day_cell_width).
    """

    client_width: float
    scroll_width: float | None = None


@dataclass(frozen=True)
class ScrollCommand:
    """An applied scroll, for the view to perform."""

    left: float
    smooth: bool

    def to_dict(self) -> dict:
        return {"left": self.left, "smooth": self.smooth}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ScrollCoordinator:
    """
    Owns the Viewport State (selected project filter + scroll offset) and
    the pending scroll target, and persists the former on every change.
    """

    def __init__(
        self,
        state_store: ViewportStateStore,
        day_cell_width: float = config.DAY_CELL_WIDTH,
        on_scroll: Callable[[ScrollCommand], None] | None = None,
        on_month_label: Callable[[str], None] | None = None,
    ):
        self._state_store = state_store
        self.day_cell_width = day_cell_width
        self._on_scroll = on_scroll
        self._on_month_label = on_month_label

        self.selected_project_id: str | None = None
        self.scroll_left: float = 0.0
        self.active_month_label: str = ""
        self.restoration_complete = False

        self._pending: ScrollRequest | None = None
        self._mounted = False
        self._metrics: ViewportMetrics | None = None
        self._timeline: Timeline | None = None

        persisted = state_store.load()
        if persisted is not None:
            self.selected_project_id = persisted.selected_project_id
            if persisted.scroll_left is not None:
                self.scroll_left = float(persisted.scroll_left)
                self._pending = ScrollRequest.to_offset(self.scroll_left)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> ScrollPhase:
        if not self._mounted:
            return ScrollPhase.UNMOUNTED
        if self._pending is not None:
            return ScrollPhase.MOUNTED_PENDING
        return ScrollPhase.MOUNTED_IDLE

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def pending(self) -> ScrollRequest | None:
        return self._pending

    @property
    def metrics(self) -> ViewportMetrics | None:
        return self._metrics

    def max_scroll(self) -> float:
        if self._metrics is None:
            return 0.0
        scroll_width = self._metrics.scroll_width
        if scroll_width is None:
            scroll_width = self._timeline.width_px(self.day_cell_width) if self._timeline else 0.0
        return max(0.0, scroll_width - self._metrics.client_width)

    def clamp(self, target: float) -> float:
        return min(max(0.0, target), self.max_scroll())

    # -------------------------------------------------------------------------
    # Lifecycle signals
    # -------------------------------------------------------------------------

    def mount(self, metrics: ViewportMetrics) -> ScrollCommand | None:
        """
        The view became able to scroll.

        A restored offset is applied without animation; with nothing to
        restore, the first view jumps to today. Either waits for the first
        grid if none has been built yet.
        """
        self._mounted = True
        self._metrics = metrics
        if self._pending is None and not self.restoration_complete:
            self._pending = ScrollRequest.to_today()
        return self._flush()

    def unmount(self) -> None:
        self._mounted = False
        self._metrics = None

    def grid_rebuilt(
        self,
        timeline: Timeline,
        has_dates: bool,
        focus_date: date | None = None,
    ) -> ScrollRequest | None:
        """
        Phase one: a new grid was published. Decide the scroll for it.

        Priority: queued target, first-view today, focus date of the filter
        change, today for an empty task set, else keep the current offset
        (re-applied because the grid width may have changed).
        """
        self._timeline = timeline
        if self._mounted and self._pending is None:
            if not self.restoration_complete:
                self._pending = ScrollRequest.to_today()
            elif focus_date is not None:
                self._pending = ScrollRequest.to_date(focus_date)
            elif not has_dates:
                self._pending = ScrollRequest.to_today()
            else:
                self._pending = ScrollRequest.to_offset(self.scroll_left)
        self._update_month_label()
        return self._pending

    def view_ready(self, metrics: ViewportMetrics | None = None) -> ScrollCommand | None:
        """Phase two: the view rendered the current grid. Apply any queued request."""
        if metrics is not None:
            self._metrics = metrics
        return self._flush()

    def _flush(self) -> ScrollCommand | None:
        if not self._mounted or self._timeline is None or self._pending is None:
            return None
        request, self._pending = self._pending, None
        command = self._apply(self._resolve(request), smooth=request.smooth)
        self.restoration_complete = True
        return command

    def _resolve(self, request: ScrollRequest) -> float:
        if request.kind is ScrollKind.OFFSET:
            return request.offset or 0.0
        if request.kind is ScrollKind.TODAY:
            return self._centered_target(self._timeline.today)
        return self._centered_target(request.target_date)

    def _centered_target(self, target_date: date) -> float:
        timeline = self._timeline
        index = timeline.index_of(target_date)
        if index is None:
            index = len(timeline.days) // 2
        client_width = self._metrics.client_width if self._metrics else 0.0
        return index * self.day_cell_width - client_width / 2 + self.day_cell_width / 2

    def _apply(self, target: float, smooth: bool) -> ScrollCommand:
        left = self.clamp(target)
        self.scroll_left = left
        command = ScrollCommand(left=left, smooth=smooth)
        if self._on_scroll is not None:
            self._on_scroll(command)
        self._update_month_label()
        self._persist()
        return command

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def _ready(self) -> bool:
        return self._mounted and self._timeline is not None and bool(self._timeline.days)

    def on_user_scroll(self, scroll_left: float) -> None:
        """The view scrolled on its own (drag, wheel)."""
        self.scroll_left = max(0.0, float(scroll_left))
        self._update_month_label()
        self._persist()

    def scroll_by_weeks(self, weeks: int) -> ScrollCommand | None:
        if not self._ready():
            return None
        return self._apply(self.scroll_left + weeks * 7 * self.day_cell_width, smooth=True)

    def scroll_by_months(self, months: int) -> ScrollCommand | None:
        """Jump to the first day of the month `months` away from the centred day."""
        if not self._ready():
            return None
        days = self._timeline.days
        reference = days[self._center_index()].date
        target_month = start_of_month(add_months(reference, months))

        target_index = self._timeline.index_of(target_month)
        if target_index is None:
            target_index = next(
                (
                    i
                    for i, day in enumerate(days)
                    if (day.date.year, day.date.month) == (target_month.year, target_month.month)
                ),
                None,
            )
        if target_index is None:
            target_index = 0 if months < 0 else len(days) - 1
        return self._apply(target_index * self.day_cell_width, smooth=True)

    def scroll_to_today(self) -> ScrollCommand | None:
        if not self._mounted:
            self._pending = ScrollRequest.to_today()
            return None
        if not self._ready():
            return None
        return self._apply(self._centered_target(self._timeline.today), smooth=True)

    def scroll_to_date(self, target_date: date, smooth: bool = True) -> ScrollCommand | None:
        if not self._ready():
            return None
        return self._apply(self._centered_target(target_date), smooth=smooth)

    def focus_day_index(self, index: int) -> ScrollCommand | None:
        """Bring a day a third of the way into the viewport."""
        if not self._ready():
            return None
        index = self._timeline.clamp_index(index)
        return self._apply(index * self.day_cell_width - self._metrics.client_width / 3, smooth=True)

    def set_selected_project(self, project_id: str | None) -> None:
        self.selected_project_id = project_id
        self._persist()

    # -------------------------------------------------------------------------
    # Month label / persistence
    # -------------------------------------------------------------------------

    def _center_index(self) -> int:
        center = self.scroll_left + self._metrics.client_width / 2
        return self._timeline.clamp_index(round_half_up(center / self.day_cell_width))

    def _update_month_label(self) -> None:
        timeline = self._timeline
        if timeline is None or not timeline.days:
            label = ""
        elif not self._mounted or self._metrics is None:
            label = timeline.month_segments[0].label
        else:
            label = timeline.month_label_at(self._center_index())
        if label != self.active_month_label:
            self.active_month_label = label
            if self._on_month_label is not None:
                self._on_month_label(label)

    def viewport_state(self) -> ViewportState:
        return ViewportState(selected_project_id=self.selected_project_id, scroll_left=self.scroll_left)

    def _persist(self) -> None:
        self._state_store.save(self.viewport_state())

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "selected_project_id": self.selected_project_id,
            "scroll_left": self.scroll_left,
            "active_month_label": self.active_month_label,
            "restoration_complete": self.restoration_complete,
            "pending": self._pending.to_dict() if self._pending else None,
            "max_scroll": self.max_scroll(),
        }

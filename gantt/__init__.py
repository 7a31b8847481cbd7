# Progress Gantt - timeline/scheduling engine
"""
Exports for api/ and other consumers.
"""

from .bars import BarGeometry, bar_geometry, task_day_range
from .controller import GanttController, detail_route
from .events import Event, StateBus
from .hierarchy import IssueGroup, ProjectGroup, build_project_hierarchy, filter_visible_groups
from .holidays import HolidayCalendar
from .models import Importance, Issue, Project, Task, TaskStatus
from .persistence import JsonFileKeyValueStore, MemoryKeyValueStore, ViewportStateStore
from .scroll import ScrollCoordinator, ScrollPhase, ViewportMetrics
from .sources import InMemoryProjectSource, YamlProjectSource, load_groups
from .timeline import Timeline, TimelineBuilder, TimelineLabels, build_timeline

__all__ = [
    "GanttController",
    "detail_route",
    "Timeline",
    "TimelineBuilder",
    "TimelineLabels",
    "build_timeline",
    "BarGeometry",
    "bar_geometry",
    "task_day_range",
    "IssueGroup",
    "ProjectGroup",
    "build_project_hierarchy",
    "filter_visible_groups",
    "HolidayCalendar",
    "Project",
    "Issue",
    "Task",
    "TaskStatus",
    "Importance",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "ViewportStateStore",
    "ScrollCoordinator",
    "ScrollPhase",
    "ViewportMetrics",
    "InMemoryProjectSource",
    "YamlProjectSource",
    "load_groups",
    "Event",
    "StateBus",
]

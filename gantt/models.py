"""
Work item model: Project (1) —< Issue (1) —< Task (*).

Records are immutable; edits produce new instances via dataclasses.replace
so grid and hierarchy snapshots never change underneath a reader.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from .theme import resolve_issue_theme_color
from .time_utils import to_calendar_day


class TaskStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DISCARDED = "discarded"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def from_raw(cls, raw: Any) -> "TaskStatus":
        """Tolerant parse; legacy todo/doing/done values and unknowns are mapped."""
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().lower().replace("-", "_")
        if key in _STATUS_ALIASES:
            return _STATUS_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            return cls.NOT_STARTED


_STATUS_LABELS = {
    TaskStatus.NOT_STARTED: "Not started",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.ON_HOLD: "On hold",
    TaskStatus.DISCARDED: "Discarded",
}

_STATUS_ALIASES = {
    "todo": TaskStatus.NOT_STARTED,
    "doing": TaskStatus.IN_PROGRESS,
    "done": TaskStatus.COMPLETED,
    "incomplete": TaskStatus.NOT_STARTED,
}


class Importance(Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def label(self) -> str:
        return _IMPORTANCE_LABELS[self]

    @classmethod
    def from_raw(cls, raw: Any) -> "Importance":
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().capitalize()
        try:
            return cls(key)
        except ValueError:
            return cls.LOW


_IMPORTANCE_LABELS = {
    Importance.CRITICAL: "Urgent & important",
    Importance.HIGH: "Urgent",
    Importance.MEDIUM: "Important",
    Importance.LOW: "Normal",
}


@dataclass(frozen=True)
class Project:
    id: str | None
    name: str
    description: str | None = None
    archived: bool = False

    @classmethod
    def from_record(cls, record: dict) -> "Project":
        return cls(
            id=record.get("id"),
            name=record.get("name", ""),
            description=record.get("description"),
            archived=bool(record.get("archived", False)),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "archived": self.archived,
        }


@dataclass(frozen=True)
class Issue:
    id: str | None
    project_id: str | None
    name: str
    description: str | None = None
    theme_color: str | None = None

    @classmethod
    def from_record(cls, record: dict, project_id: str | None = None) -> "Issue":
        return cls(
            id=record.get("id"),
            project_id=record.get("project_id", project_id),
            name=record.get("name", ""),
            description=record.get("description"),
            theme_color=record.get("theme_color"),
        )

    def theme(self) -> str:
        """Explicit colour, else a colour hashed from id, project id, then name."""
        fallback_key = self.id or self.project_id or self.name or None
        return resolve_issue_theme_color(self.theme_color, fallback_key)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            "description": self.description,
            "theme_color": self.theme_color,
            "theme": self.theme(),
        }


@dataclass(frozen=True)
class Task:
    """
    A schedulable work item.

    start_date/end_date are canonical calendar days; either, both, or
    neither may be set. Raw values (strings, datetimes) are coerced by
    from_record() or by the loader's date normalization.
    """

    id: str | None
    project_id: str | None
    issue_id: str | None
    title: str
    start_date: date | None = None
    end_date: date | None = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    importance: Importance = Importance.LOW
    theme_color: str | None = None
    assignee_ids: tuple[str, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_record(
        cls,
        record: dict,
        project_id: str | None = None,
        issue_id: str | None = None,
        tz: str | None = None,
    ) -> "Task":
        return cls(
            id=record.get("id"),
            project_id=record.get("project_id", project_id),
            issue_id=record.get("issue_id", issue_id),
            title=record.get("title", ""),
            start_date=to_calendar_day(record.get("start_date"), tz),
            end_date=to_calendar_day(record.get("end_date"), tz),
            status=TaskStatus.from_raw(record.get("status")),
            importance=Importance.from_raw(record.get("importance")),
            theme_color=record.get("theme_color"),
            assignee_ids=tuple(record.get("assignee_ids") or ()),
            tags=tuple(record.get("tags") or ()),
        )

    @property
    def has_period(self) -> bool:
        """Both start and end set."""
        return self.start_date is not None and self.end_date is not None

    @property
    def effective_start(self) -> date | None:
        return self.start_date if self.start_date is not None else self.end_date

    @property
    def effective_end(self) -> date | None:
        return self.end_date if self.end_date is not None else self.start_date

    def theme(self, issue: Issue) -> str:
        candidate = self.theme_color.strip() if isinstance(self.theme_color, str) else ""
        return candidate or issue.theme()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "issue_id": self.issue_id,
            "title": self.title,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "status": self.status.value,
            "status_label": self.status.label,
            "importance": self.importance.value,
            "importance_label": self.importance.label,
            "theme_color": self.theme_color,
            "assignee_ids": list(self.assignee_ids),
            "tags": list(self.tags),
        }


def same_task(a: Task | None, b: Task | None) -> bool:
    """Identity of two task records: by id when both have one, else by object."""
    if a is None or b is None:
        return False
    if a.id and b.id:
        return a.id == b.id
    return a is b

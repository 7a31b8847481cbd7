"""
Shared Pydantic request/response models for the Gantt API.

These models give FastAPI the type information it needs to generate
accurate OpenAPI schemas instead of empty `schema: {}`.

Usage:
    from api.response_models import TimelineResponse, ScrollResponse

    @router.get("/timeline", response_model=TimelineResponse)
    def get_timeline(): ...
"""

from typing import Any

from pydantic import BaseModel, Field

# ==== Timeline ====


class TimelineDayModel(BaseModel):
    date: str
    is_weekend: bool
    is_holiday: bool
    is_today: bool
    day_label: str
    weekday_label: str


class MonthSegmentModel(BaseModel):
    year: int
    month: int
    label: str
    span: int


class TimelineResponse(BaseModel):
    """Current calendar grid."""

    timeline_start: str = Field(description="First grid day (a Monday)")
    timeline_end: str = Field(description="Last grid day (a Sunday)")
    today: str
    total_days: int
    days: list[TimelineDayModel] = Field(default_factory=list)
    month_segments: list[MonthSegmentModel] = Field(default_factory=list)


# ==== Hierarchy ====


class HierarchyResponse(BaseModel):
    """Full project tree plus the filtered Gantt rows."""

    selected_project_id: str | None = None
    projects: list[Any] = Field(default_factory=list, description="project → issues → tasks")
    rows: list[Any] = Field(default_factory=list, description="Visible issue rows with bar geometry")


class GeometryResponse(BaseModel):
    task_id: str
    offset_days: int
    duration_days: int
    offset_percent: float
    width_percent: float
    highlighted: bool


# ==== State ====


class StateResponse(BaseModel):
    """Interaction, viewport and load status."""

    model_config = {"extra": "allow"}

    loading: bool
    load_error: str | None = None
    selected_project_id: str | None = None


class ScrollResponse(BaseModel):
    """Result of a viewport command. `command` is null when nothing was applied."""

    command: dict[str, Any] | None = None
    scroll_left: float
    active_month_label: str
    phase: str


class MutationResponse(BaseModel):
    """Standard mutation result."""

    success: bool = Field(description="Whether the operation succeeded")

    model_config = {"extra": "allow"}


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or degraded")
    timestamp: str = Field(description="ISO timestamp")
    load_error: str | None = None


# ==== Requests ====


class FilterRequest(BaseModel):
    project_id: str | None = Field(default=None, description="null or empty for all projects")


class MountRequest(BaseModel):
    client_width: float = Field(gt=0)
    scroll_width: float | None = Field(default=None, ge=0)


class ViewReadyRequest(BaseModel):
    client_width: float | None = Field(default=None, gt=0)
    scroll_width: float | None = Field(default=None, ge=0)


class UserScrollRequest(BaseModel):
    scroll_left: float = Field(ge=0)


class StepRequest(BaseModel):
    steps: int = Field(description="Positive scrolls forward, negative backward")


class HoverDayRequest(BaseModel):
    index: int | None = Field(default=None, ge=0)


class HoverTaskRequest(BaseModel):
    task_id: str | None = None


class SelectRequest(BaseModel):
    task_id: str


class SidebarSelectRequest(BaseModel):
    project_id: str
    issue_id: str
    task_id: str

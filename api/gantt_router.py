"""
Gantt API Router — timeline state and view commands.

The view layer reads the grid, rows and interaction state, reports viewport
lifecycle (mount, view-ready, user scroll) and issues commands (filter,
hover, select, scroll jumps).

Usage in server.py:
    from api.gantt_router import gantt_router
    app.include_router(gantt_router)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.response_models import (
    FilterRequest,
    GeometryResponse,
    HierarchyResponse,
    HoverDayRequest,
    HoverTaskRequest,
    MountRequest,
    MutationResponse,
    ScrollResponse,
    SelectRequest,
    SidebarSelectRequest,
    StateResponse,
    StepRequest,
    TimelineResponse,
    UserScrollRequest,
    ViewReadyRequest,
)
from gantt import paths
from gantt.controller import GanttController
from gantt.persistence import JsonFileKeyValueStore
from gantt.scroll import ScrollCommand
from gantt.sources import YamlProjectSource

logger = logging.getLogger(__name__)

gantt_router = APIRouter(prefix="/api/gantt", tags=["Gantt"])

# Process-wide controller (one viewport per server process)
_controller: GanttController | None = None


def create_default_controller() -> GanttController:
    """Controller over the YAML work-item file and the JSON state file."""
    return GanttController(
        source=YamlProjectSource(paths.work_items_path()),
        store=JsonFileKeyValueStore(paths.state_path()),
    )


def get_controller() -> GanttController:
    global _controller
    if _controller is None:
        _controller = create_default_controller()
    return _controller


def set_controller(controller: GanttController | None) -> None:
    global _controller
    _controller = controller


def _scroll_response(controller: GanttController, command: ScrollCommand | None) -> dict:
    return {
        "command": command.to_dict() if command else None,
        "scroll_left": controller.scroll.scroll_left,
        "active_month_label": controller.active_month_label,
        "phase": controller.scroll.phase.value,
    }


def _require_timeline(controller: GanttController):
    if controller.timeline is None:
        raise HTTPException(status_code=409, detail="Timeline not built yet; load data first")
    return controller.timeline


# ==== Reads ====


@gantt_router.get("/timeline", response_model=TimelineResponse)
def get_timeline(controller: GanttController = Depends(get_controller)) -> dict:
    return _require_timeline(controller).to_dict()


@gantt_router.get("/hierarchy", response_model=HierarchyResponse)
def get_hierarchy(controller: GanttController = Depends(get_controller)) -> dict:
    return {
        "selected_project_id": controller.selected_project_id,
        "projects": [p.to_dict() for p in controller.hierarchy],
        "rows": controller.rows_to_dict(),
    }


@gantt_router.get("/state", response_model=StateResponse)
def get_state(controller: GanttController = Depends(get_controller)) -> dict:
    return controller.to_dict()


@gantt_router.get("/tasks/{task_id}/geometry", response_model=GeometryResponse)
def get_task_geometry(task_id: str, controller: GanttController = Depends(get_controller)) -> dict:
    _require_timeline(controller)
    found = controller.find_task(task_id)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Task not visible: {task_id}")
    _, task = found
    return {
        "task_id": task_id,
        **controller.task_geometry(task).to_dict(),
        "highlighted": controller.is_task_highlighted(task),
    }


# ==== Data / filter ====


@gantt_router.post("/reload", response_model=MutationResponse)
async def reload_data(controller: GanttController = Depends(get_controller)) -> dict:
    success = await controller.load()
    if not success:
        logger.warning("Reload failed; serving last-known-good state: %s", controller.load_error)
    return {"success": success, "load_error": controller.load_error}


@gantt_router.post("/filter", response_model=MutationResponse)
def select_project_filter(
    body: FilterRequest, controller: GanttController = Depends(get_controller)
) -> dict:
    project_id = (body.project_id or "").strip() or None
    if project_id and not any(p.id == project_id for p in controller.available_projects):
        raise HTTPException(status_code=404, detail=f"Unknown project: {project_id}")
    controller.select_project_filter(project_id)
    return {"success": True, "selected_project_id": controller.selected_project_id}


# ==== Viewport ====


@gantt_router.post("/viewport/mount", response_model=ScrollResponse)
def mount_viewport(body: MountRequest, controller: GanttController = Depends(get_controller)) -> dict:
    command = controller.mount(body.client_width, body.scroll_width)
    return _scroll_response(controller, command)


@gantt_router.post("/viewport/ready", response_model=ScrollResponse)
def viewport_ready(
    body: ViewReadyRequest, controller: GanttController = Depends(get_controller)
) -> dict:
    command = controller.view_ready(body.client_width, body.scroll_width)
    return _scroll_response(controller, command)


@gantt_router.post("/viewport/scroll", response_model=ScrollResponse)
def user_scroll(body: UserScrollRequest, controller: GanttController = Depends(get_controller)) -> dict:
    controller.on_user_scroll(body.scroll_left)
    return _scroll_response(controller, None)


@gantt_router.post("/scroll/weeks", response_model=ScrollResponse)
def scroll_by_weeks(body: StepRequest, controller: GanttController = Depends(get_controller)) -> dict:
    return _scroll_response(controller, controller.scroll_by_weeks(body.steps))


@gantt_router.post("/scroll/months", response_model=ScrollResponse)
def scroll_by_months(body: StepRequest, controller: GanttController = Depends(get_controller)) -> dict:
    return _scroll_response(controller, controller.scroll_by_months(body.steps))


@gantt_router.post("/scroll/today", response_model=ScrollResponse)
def scroll_to_today(controller: GanttController = Depends(get_controller)) -> dict:
    return _scroll_response(controller, controller.scroll_to_today())


# ==== Hover / selection ====


@gantt_router.post("/hover/day", response_model=StateResponse)
def hover_day(body: HoverDayRequest, controller: GanttController = Depends(get_controller)) -> dict:
    timeline = _require_timeline(controller)
    if body.index is not None and body.index >= len(timeline.days):
        raise HTTPException(status_code=400, detail=f"Day index out of range: {body.index}")
    controller.hover_day(body.index)
    return controller.to_dict()


@gantt_router.post("/hover/task", response_model=StateResponse)
def hover_task(body: HoverTaskRequest, controller: GanttController = Depends(get_controller)) -> dict:
    task = None
    if body.task_id is not None:
        found = controller.find_task(body.task_id)
        if found is None:
            raise HTTPException(status_code=404, detail=f"Task not visible: {body.task_id}")
        _, task = found
    controller.hover_task(task)
    return controller.to_dict()


@gantt_router.post("/select", response_model=StateResponse)
def select_task(body: SelectRequest, controller: GanttController = Depends(get_controller)) -> dict:
    found = controller.find_task(body.task_id)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Task not visible: {body.task_id}")
    group, task = found
    controller.select_task(group, task)
    return controller.to_dict()


@gantt_router.post("/select/sidebar", response_model=ScrollResponse)
def select_sidebar_task(
    body: SidebarSelectRequest, controller: GanttController = Depends(get_controller)
) -> dict:
    found = controller.find_task(body.task_id)
    if found is None or found[0].key != (body.project_id, body.issue_id):
        raise HTTPException(status_code=404, detail=f"Task not visible: {body.task_id}")
    _, task = found
    controller.select_sidebar_task(body.project_id, body.issue_id, task)
    return _scroll_response(controller, None)


@gantt_router.post("/selection/close", response_model=StateResponse)
def close_selection(controller: GanttController = Depends(get_controller)) -> dict:
    controller.close_detail_panel()
    return controller.to_dict()


@gantt_router.post("/selection/detail", response_model=MutationResponse)
def go_to_selected_detail(controller: GanttController = Depends(get_controller)) -> dict:
    route = controller.go_to_task_detail()
    if route is None:
        raise HTTPException(status_code=409, detail="No complete selection to open")
    return {"success": True, "route": route}

"""
Test configuration — ensures repo root is in sys.path + determinism guards.

This allows tests to import from top-level packages (gantt, api).
Every test runs with GANTT_HOME pointed at a temp directory so the real
viewport state file under ~/.progress_gantt is never read or written, and
with a fixed clock so "today" does not drift.
"""

import sys
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import gantt.*, api.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from gantt.hierarchy import IssueGroup  # noqa: E402
from gantt.holidays import no_holidays  # noqa: E402
from gantt.models import Issue, Project, Task  # noqa: E402
from gantt.persistence import MemoryKeyValueStore  # noqa: E402
from gantt.sources import InMemoryProjectSource  # noqa: E402
from gantt.timeline import TimelineLabels  # noqa: E402

# 2024-01-10 12:00 in Asia/Tokyo (a Wednesday)
FIXED_NOW = datetime(2024, 1, 10, 3, 0, tzinfo=UTC)
FIXED_TODAY = date(2024, 1, 10)


# =============================================================================
# DETERMINISM GUARD: isolate app home and state file
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_app_home(tmp_path, monkeypatch):
    """Point GANTT_HOME / GANTT_STATE_FILE at a temp dir for every test."""
    monkeypatch.setenv("GANTT_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("GANTT_STATE_FILE", str(tmp_path / "home" / "viewport_state.json"))
    return tmp_path / "home"


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def labels():
    return TimelineLabels()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


def make_task(task_id, project_id="p1", issue_id="i1", start=None, end=None, **kwargs) -> Task:
    return Task(
        id=task_id,
        project_id=project_id,
        issue_id=issue_id,
        title=kwargs.pop("title", f"Task {task_id}"),
        start_date=start,
        end_date=end,
        **kwargs,
    )


@pytest.fixture
def projects():
    return [
        Project(id="p1", name="Website relaunch"),
        Project(id="p2", name="Year-end close"),
        Project(id="p3", name="Empty project"),
    ]


@pytest.fixture
def source(projects):
    """Two projects with dated tasks and one project without tasks."""
    issues = {
        "p1": [Issue(id="i1", project_id="p1", name="Design", theme_color="#4ECDC4")],
        "p2": [Issue(id="i2", project_id="p2", name="Reporting")],
        "p3": [Issue(id="i3", project_id="p3", name="Backlog")],
    }
    tasks = {
        ("p1", "i1"): [
            make_task("t1", start=date(2024, 1, 10), end=date(2024, 1, 12)),
            make_task("t2", end=date(2024, 6, 1)),
        ],
        ("p2", "i2"): [
            make_task("t3", "p2", "i2", start=date(2024, 3, 4), end=date(2024, 3, 8)),
        ],
        ("p3", "i3"): [make_task("t4", "p3", "i3")],
    }
    return InMemoryProjectSource(projects, issues, tasks)


@pytest.fixture
def groups(projects):
    p1, p2, _ = projects
    i1 = Issue(id="i1", project_id="p1", name="Design")
    i2 = Issue(id="i2", project_id="p2", name="Reporting")
    return (
        IssueGroup(
            project=p1,
            issue=i1,
            tasks=(
                make_task("t1", start=date(2024, 1, 10), end=date(2024, 1, 12)),
                make_task("t2", end=date(2024, 6, 1)),
            ),
        ),
        IssueGroup(
            project=p2,
            issue=i2,
            tasks=(make_task("t3", "p2", "i2", start=date(2024, 3, 4), end=date(2024, 3, 8)),),
        ),
    )


@pytest.fixture
def holiday_free():
    return no_holidays

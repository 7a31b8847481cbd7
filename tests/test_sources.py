"""
Tests for work item sources and row loading.
"""

import asyncio
import functools
from datetime import date

import pytest
from conftest import make_task

from gantt import paths
from gantt.errors import LoadError
from gantt.models import Issue, Project, TaskStatus
from gantt.sources import InMemoryProjectSource, YamlProjectSource, load_groups, normalize_task_dates


def async_test(coro):
    """Decorator to run async tests with asyncio.run."""

    @functools.wraps(coro)
    def wrapper(*args, **kwargs):
        return asyncio.run(coro(*args, **kwargs))

    return wrapper


class _FailingSource(InMemoryProjectSource):
    async def list_issues(self, project_id):
        raise ConnectionError("backend unreachable")


class TestInMemorySource:
    @async_test
    async def test_archived_projects_hidden(self):
        source = InMemoryProjectSource(
            [Project(id="p1", name="a"), Project(id="p2", name="b", archived=True)]
        )
        assert [p.id for p in await source.list_projects()] == ["p1"]


class TestLoadGroups:
    @async_test
    async def test_rows_in_project_then_issue_order(self, source):
        projects, groups = await load_groups(source)
        assert [p.id for p in projects] == ["p1", "p2", "p3"]
        assert [g.key for g in groups] == [("p1", "i1"), ("p2", "i2"), ("p3", "i3")]
        assert [t.id for t in groups[0].tasks] == ["t1", "t2"]

    @async_test
    async def test_issue_without_id_skipped(self, caplog):
        source = InMemoryProjectSource(
            [Project(id="p1", name="a")],
            {"p1": [Issue(id=None, project_id="p1", name="orphan"), Issue(id="i1", project_id="p1", name="ok")]},
        )
        _, groups = await load_groups(source)
        assert [g.issue.id for g in groups] == ["i1"]
        assert "without id" in caplog.text

    @async_test
    async def test_raw_dates_normalized(self):
        raw = make_task("t1", start="2024-01-10T15:30:00Z", end="bad")
        source = InMemoryProjectSource(
            [Project(id="p1", name="a")],
            {"p1": [Issue(id="i1", project_id="p1", name="x")]},
            {("p1", "i1"): [raw]},
        )
        _, groups = await load_groups(source)
        task = groups[0].tasks[0]
        assert task.start_date == date(2024, 1, 11)
        assert task.end_date is None

    @async_test
    async def test_collaborator_failure_becomes_load_error(self):
        source = _FailingSource([Project(id="p1", name="a")])
        with pytest.raises(LoadError, match="backend unreachable"):
            await load_groups(source)


class TestYamlSource:
    @async_test
    async def test_sample_file(self):
        source = YamlProjectSource(paths.work_items_path())
        projects, groups = await load_groups(source)
        assert [p.id for p in projects] == ["web-relaunch", "year-end-close"]
        ledger = next(g for g in groups if g.issue.id == "reporting").find_task("ledger-review")
        assert ledger.start_date == date(2026, 12, 1)
        assert ledger.end_date == date(2026, 12, 18)
        cleanup = next(g for g in groups if g.issue.id == "reporting").find_task("backlog-cleanup")
        assert cleanup.status is TaskStatus.NOT_STARTED
        assert cleanup.effective_start is None

    @async_test
    async def test_reread_on_every_load(self, tmp_path):
        path = tmp_path / "items.yaml"
        path.write_text("projects:\n  - id: p1\n    name: One\n", encoding="utf-8")
        source = YamlProjectSource(path)
        assert len((await load_groups(source))[0]) == 1
        path.write_text(
            "projects:\n  - id: p1\n    name: One\n  - id: p2\n    name: Two\n", encoding="utf-8"
        )
        assert len((await load_groups(source))[0]) == 2

    @async_test
    async def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            await load_groups(YamlProjectSource(tmp_path / "missing.yaml"))

    @async_test
    async def test_broken_yaml(self, tmp_path):
        path = tmp_path / "items.yaml"
        path.write_text("projects: [unclosed", encoding="utf-8")
        with pytest.raises(LoadError):
            await load_groups(YamlProjectSource(path))


class TestNormalizeTaskDates:
    def test_dates_pass_through(self):
        task = make_task("t1", start=date(2024, 1, 10), end=date(2024, 1, 12))
        assert normalize_task_dates(task) == task

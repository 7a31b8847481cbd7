"""
Work item sources: the external project/issue/task collaborator.

The engine only needs three read calls:

    list_projects()                 non-archived projects visible to the user
    list_issues(project_id)
    list_tasks(project_id, issue_id)

load_groups() turns them into the flat IssueGroup rows the hierarchy and
grid are built from. Issues are fetched for all projects concurrently;
tasks are fetched per issue.
"""

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import Protocol

import yaml

from .errors import LoadError
from .hierarchy import IssueGroup
from .models import Issue, Project, Task
from .time_utils import to_calendar_day

logger = logging.getLogger(__name__)


class ProjectSource(Protocol):
    async def list_projects(self) -> list[Project]: ...

    async def list_issues(self, project_id: str) -> list[Issue]: ...

    async def list_tasks(self, project_id: str, issue_id: str) -> list[Task]: ...


class InMemoryProjectSource:
    """Source over plain lists, keyed the way the store nests them."""

    def __init__(
        self,
        projects: list[Project] | None = None,
        issues: dict[str, list[Issue]] | None = None,
        tasks: dict[tuple[str, str], list[Task]] | None = None,
    ):
        self.projects = list(projects or [])
        self.issues = dict(issues or {})
        self.tasks = dict(tasks or {})

    async def list_projects(self) -> list[Project]:
        return [p for p in self.projects if not p.archived]

    async def list_issues(self, project_id: str) -> list[Issue]:
        return list(self.issues.get(project_id, []))

    async def list_tasks(self, project_id: str, issue_id: str) -> list[Task]:
        return list(self.tasks.get((project_id, issue_id), []))


class YamlProjectSource(InMemoryProjectSource):
    """
    Source backed by a YAML fixture file, re-read on every list_projects().

    Format:
        projects:
          - id: p1
            name: Website relaunch
            issues:
              - id: i1
                name: Design
                theme_color: "#4ECDC4"
                tasks:
                  - id: t1
                    title: Wireframes
                    start_date: 2024-01-10
                    end_date: 2024-01-12
                    status: in_progress
                    importance: High
    """

    def __init__(self, path: Path, tz: str | None = None):
        super().__init__()
        self.path = Path(path)
        self._tz = tz

    def _read(self) -> None:
        try:
            with open(self.path, encoding="utf-8") as f:
                document = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise LoadError(f"Cannot read work items from {self.path}: {e}") from e

        projects, issues, tasks = [], {}, {}
        for p in document.get("projects") or []:
            project = Project.from_record(p)
            projects.append(project)
            issues[project.id] = []
            for i in p.get("issues") or []:
                issue = Issue.from_record(i, project_id=project.id)
                issues[project.id].append(issue)
                tasks[(project.id, issue.id)] = [
                    Task.from_record(t, project_id=project.id, issue_id=issue.id, tz=self._tz)
                    for t in i.get("tasks") or []
                ]
        self.projects, self.issues, self.tasks = projects, issues, tasks

    async def list_projects(self) -> list[Project]:
        self._read()
        return await super().list_projects()


def normalize_task_dates(task: Task, tz: str | None = None) -> Task:
    """Coerce raw start/end values to canonical days; malformed values become None."""
    return replace(
        task,
        start_date=to_calendar_day(task.start_date, tz),
        end_date=to_calendar_day(task.end_date, tz),
    )


async def load_groups(
    source: ProjectSource, tz: str | None = None
) -> tuple[list[Project], tuple[IssueGroup, ...]]:
    """
    Fetch every (project, issue, tasks) row.

    Raises:
        LoadError: If any collaborator call fails; nothing partial is returned
    """
    try:
        projects = [p for p in await source.list_projects() if p.id and not p.archived]
        issue_lists = await asyncio.gather(*(source.list_issues(p.id) for p in projects))

        groups: list[IssueGroup] = []
        for project, issues in zip(projects, issue_lists):
            for issue in issues:
                if not issue.id:
                    logger.warning("Skipping issue without id in project %s", project.id)
                    continue
                tasks = await source.list_tasks(project.id, issue.id)
                groups.append(
                    IssueGroup(
                        project=project,
                        issue=issue,
                        tasks=tuple(normalize_task_dates(t, tz) for t in tasks),
                    )
                )
    except LoadError:
        raise
    except Exception as e:
        raise LoadError(f"Failed to load work items: {e}") from e

    logger.info(
        "Loaded work items",
        extra={"projects": len(projects), "issue_rows": len(groups)},
    )
    return projects, tuple(groups)

"""
Viewport state persistence.

The viewport ({selectedProjectId, scrollLeft}) is stored as JSON under a
single key of an injected key-value store. Persistence is best-effort:
read failures mean "nothing persisted", write failures are logged and
dropped, and neither ever reaches the user.
"""

import json
import logging
import math
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from . import config
from .errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local store, used by tests and as a fallback."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """
    Key-value store backed by one JSON object on disk.

    Writes go to a temp file in the same directory and are renamed into
    place, so a crash never leaves a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except PersistenceError:
            logger.warning("Overwriting unreadable state file %s", self.path)
            data = {}
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e


@dataclass(frozen=True)
class ViewportState:
    selected_project_id: str | None = None
    scroll_left: float | None = None

    def to_json(self) -> str:
        return json.dumps(
            {"selectedProjectId": self.selected_project_id, "scrollLeft": self.scroll_left or 0}
        )

    @classmethod
    def from_json(cls, raw: str) -> "ViewportState":
        """
        Parse a stored payload, keeping only well-typed fields.

        Raises:
            ValueError: If raw is not a JSON object
        """
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("viewport state is not a JSON object")

        project_id = parsed.get("selectedProjectId")
        if project_id is not None and not isinstance(project_id, str):
            project_id = None

        scroll_left = parsed.get("scrollLeft")
        if (
            isinstance(scroll_left, bool)
            or not isinstance(scroll_left, (int, float))
            or not math.isfinite(scroll_left)
        ):
            scroll_left = None

        return cls(selected_project_id=project_id, scroll_left=scroll_left)


class ViewportStateStore:
    """Best-effort load/save of ViewportState under one key."""

    def __init__(self, store: KeyValueStore, key: str = config.STORAGE_KEY):
        self._store = store
        self.key = key

    def load(self) -> ViewportState | None:
        try:
            raw = self._store.get_item(self.key)
            if not raw:
                return None
            return ViewportState.from_json(raw)
        except Exception as e:
            # Any store or payload failure counts as "nothing persisted"
            logger.warning("Failed to restore viewport state: %s", e)
            return None

    def save(self, state: ViewportState) -> bool:
        try:
            self._store.set_item(self.key, state.to_json())
            return True
        except Exception as e:
            logger.warning("Failed to persist viewport state: %s", e)
            return False

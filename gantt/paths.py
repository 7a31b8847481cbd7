from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "GANTT_HOME"
APP_ENV_STATE = "GANTT_STATE_FILE"
APP_ENV_DATA = "GANTT_DATA_FILE"


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains gantt/, api/, config/, tests/.
    """
    return Path(__file__).parent.parent.resolve()


def app_home() -> Path:
    """
    User-writable home for the Gantt engine.
    Override with GANTT_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".progress_gantt").resolve()


def config_dir() -> Path:
    """Repository config directory (gantt.yaml)."""
    return project_root() / "config"


def data_dir() -> Path:
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def state_path() -> Path:
    """
    JSON file backing the viewport key-value store.

    Resolution order:
    1. GANTT_STATE_FILE env var (explicit override)
    2. ~/.progress_gantt/data/viewport_state.json (default)
    """
    if os.environ.get(APP_ENV_STATE):
        return Path(os.environ[APP_ENV_STATE]).expanduser().resolve()
    return data_dir() / "viewport_state.json"


def work_items_path() -> Path:
    """
    YAML file of projects/issues/tasks served by the API.

    Override with GANTT_DATA_FILE; defaults to config/sample_work_items.yaml.
    """
    if os.environ.get(APP_ENV_DATA):
        return Path(os.environ[APP_ENV_DATA]).expanduser().resolve()
    return config_dir() / "sample_work_items.yaml"

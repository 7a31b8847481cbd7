"""
Centralized configuration for the progress Gantt engine.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import logging
import os
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# ============================================================
# Calendar
# ============================================================

TIMEZONE: str = os.environ.get("GANTT_TIMEZONE", "Asia/Tokyo")
"""Canonical timezone for every day-boundary decision (today, weekends, task dates)."""

WINDOW_YEARS: int = int(os.environ.get("GANTT_WINDOW_YEARS", "5"))
"""Default timeline window: today minus/plus this many years, week-aligned."""

# ============================================================
# Viewport
# ============================================================

DAY_CELL_WIDTH: int = int(os.environ.get("GANTT_DAY_CELL_WIDTH", "28"))
"""Rendered width of one day column, in px. Scroll math is done in these units."""

# ============================================================
# Persistence
# ============================================================

STORAGE_KEY: str = os.environ.get("GANTT_STORAGE_KEY", "progressGanttState")
"""Key under which {selectedProjectId, scrollLeft} is stored in the key-value store."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("GANTT_LOG_LEVEL", "INFO")
"""Root log level for the API server."""

LOG_FILE: str | None = os.environ.get("GANTT_LOG_FILE") or None
"""Optional rotating JSON log file; stderr only when unset."""

# ============================================================
# Labels (overridable from config/gantt.yaml)
# ============================================================

DEFAULT_WEEKDAY_LABELS: list[str] = ["月", "火", "水", "木", "金", "土", "日"]
"""Short weekday names, Monday first."""

DEFAULT_MONTH_LABEL_FORMAT: str = "{year}年{month}月"
"""Month segment label; formatted with year and month (1-12)."""

# ============================================================
# YAML overrides
# ============================================================


def load_gantt_yaml(config_path: Path | None = None) -> dict:
    """
    Load config/gantt.yaml (labels, extra holidays).

    Returns an empty dict when the file is missing or unreadable so callers
    fall back to the defaults above.
    """
    if config_path is None:
        from . import paths

        config_path = paths.config_dir() / "gantt.yaml"

    if not config_path.exists():
        logger.warning("Gantt config not found at %s, using defaults", config_path)
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as exc:
        logger.error("Failed to load gantt config %s: %s", config_path, exc)
        return {}
    if not isinstance(loaded, dict):
        logger.error("Gantt config %s is not a mapping, using defaults", config_path)
        return {}
    return loaded

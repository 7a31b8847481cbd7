"""
Exception hierarchy for the Gantt engine.

None of these are user-fatal: callers log them and fall back to the
last-known-good or default state.
"""


class GanttError(Exception):
    """Base class for all Gantt engine errors."""


class LoadError(GanttError):
    """A project/issue/task collaborator call failed."""


class PersistenceError(GanttError):
    """Reading or writing the viewport key-value store failed."""


class InvalidDateError(GanttError, ValueError):
    """A stored date value could not be interpreted as a calendar day."""

    def __init__(self, value):
        super().__init__(f"Unparseable date value: {value!r}")
        self.value = value

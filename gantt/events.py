"""
State-change notifications.

The controller publishes an Event after every transition; the view layer
(or the HTTP surface) subscribes instead of polling shared variables.
Delivery is synchronous and in subscription order.
"""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

logger = logging.getLogger(__name__)

TIMELINE_REBUILT = "timeline_rebuilt"
HIERARCHY_CHANGED = "hierarchy_changed"
INTERACTION_CHANGED = "interaction_changed"
SCROLL_APPLIED = "scroll_applied"
MONTH_LABEL_CHANGED = "month_label_changed"
LOAD_FAILED = "load_failed"
NAVIGATE = "navigate"


@dataclass
class Event:
    """A single state-change notification."""

    event_type: str
    data: dict = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_dict(self) -> dict:
        return asdict(self)


Subscriber = Callable[[Event], None]


class StateBus:
    """Broadcasts events to subscribers and keeps a bounded history."""

    def __init__(self, max_history: int = 100):
        self._subscribers: list[Subscriber] = []
        self._event_history: list[Event] = []
        self._max_history = max_history

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, event_type: str, **data) -> Event:
        event = Event(event_type=event_type, data=data)
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                # A broken subscriber must not stop the others
                logger.exception("State subscriber failed on %s", event_type)
        return event

    def get_history(self, event_type: str | None = None) -> list[Event]:
        if event_type is None:
            return self._event_history.copy()
        return [e for e in self._event_history if e.event_type == event_type]

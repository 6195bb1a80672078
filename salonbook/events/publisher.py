"""Event publisher - hands committed events to notification handlers."""
from datetime import datetime
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


EventHandler = Callable[[str, Dict[str, Any]], None]


class EventPublisher:
    """
    Publishes domain events to registered handlers.

    Publishing happens after the owning transaction has committed. It is
    fire-and-forget: a failing handler is logged and never reaches the
    caller, so notifications cannot undo or fail a booking change.
    """

    def __init__(self, handlers: Optional[List[EventHandler]] = None):
        self.handlers: List[EventHandler] = list(handlers or [])

    def subscribe(self, handler: EventHandler) -> None:
        self.handlers.append(handler)

    def publish(self, event: Event) -> None:
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for JSON serialization
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        for handler in self.handlers:
            try:
                handler(event_type, payload)
            except Exception:
                logger.exception("Notification handler failed for %s", event_type)

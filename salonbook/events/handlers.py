"""Default notification handlers."""
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class LoggingNotificationHandler:
    """Stand-in for the notification subsystem: records each event in the log."""

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        logger.info(f"Dispatching notification for {event_type}", extra={"event": payload})

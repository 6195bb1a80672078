"""Domain events and their publisher."""
from .booking_events import BookingCancelled, BookingCreated, BookingRescheduled
from .handlers import LoggingNotificationHandler
from .publisher import Event, EventHandler, EventPublisher


def default_publisher() -> EventPublisher:
    return EventPublisher([LoggingNotificationHandler()])


__all__ = [
    "BookingCancelled",
    "BookingCreated",
    "BookingRescheduled",
    "Event",
    "EventHandler",
    "EventPublisher",
    "LoggingNotificationHandler",
    "default_publisher",
]

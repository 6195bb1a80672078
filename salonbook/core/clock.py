# salonbook/core/clock.py
"""
Clock abstraction for rules that depend on the current instant.

Services never read the system time directly; they ask the clock they were
constructed with, which keeps same-day and future-time rules testable.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current instant as an aware UTC datetime."""
        ...


class SystemClock:
    """Reads the wall clock of the host."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """A clock pinned to a settable instant."""

    def __init__(self, instant: datetime) -> None:
        self.set(instant)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware instant")
        self._instant = instant.astimezone(timezone.utc)

    def advance(self, **kwargs: float) -> None:
        self._instant = self._instant + timedelta(**kwargs)

    def now(self) -> datetime:
        return self._instant

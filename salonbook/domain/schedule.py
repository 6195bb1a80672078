"""Value types for recurring schedules and absolute intervals.

A WeeklyWindow is a periodic interval set (weekday plus local wall-clock
range). It only becomes comparable with anything after resolve() turns it
into a TimeInterval for one concrete calendar date. All overlap and
subtraction arithmetic lives on TimeInterval.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, List, Optional

from ..core.timezone_service import TimezoneService


@dataclass(frozen=True, order=True)
class TimeInterval:
    """Half-open absolute interval [start, end) in UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeInterval bounds must be timezone-aware")
        if self.end <= self.start:
            raise ValueError(f"Interval end {self.end} must be after start {self.start}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        # Touching edges do not overlap
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeInterval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def subtract(self, blocks: Iterable["TimeInterval"]) -> List["TimeInterval"]:
        """Return the parts of this interval not covered by any block, in order."""
        free: List[TimeInterval] = [self]
        for block in sorted(blocks):
            remaining: List[TimeInterval] = []
            for piece in free:
                if not piece.overlaps(block):
                    remaining.append(piece)
                    continue
                if piece.start < block.start:
                    remaining.append(TimeInterval(piece.start, block.start))
                if block.end < piece.end:
                    remaining.append(TimeInterval(block.end, piece.end))
            free = remaining
        return free

    def iter_starts(self, duration: timedelta, step: timedelta) -> Iterator[datetime]:
        """Yield start instants, step apart, whose [start, start+duration) fits inside."""
        cursor = self.start
        while cursor + duration <= self.end:
            yield cursor
            cursor += step


@dataclass(frozen=True)
class WeeklyWindow:
    """Recurring weekly wall-clock range; weekday follows date.weekday() (0 = Monday)."""

    weekday: int
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"weekday must be between 0 and 6, got {self.weekday}")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")

    def applies_to(self, calendar_date: date) -> bool:
        return calendar_date.weekday() == self.weekday

    def resolve(self, calendar_date: date, zone: str) -> Optional[TimeInterval]:
        """
        Resolve to an absolute interval on calendar_date in zone.

        Returns None when the window does not recur on that date's weekday, or
        when a daylight-saving gap collapses it to nothing.
        """
        if not self.applies_to(calendar_date):
            return None
        start = TimezoneService.resolve_wall_time(calendar_date, self.start_time, zone)
        end = TimezoneService.resolve_wall_time(calendar_date, self.end_time, zone)
        if end <= start:
            return None
        return TimeInterval(start, end)

    def overlaps(self, other: "WeeklyWindow") -> bool:
        return (
            self.weekday == other.weekday
            and self.start_time < other.end_time
            and self.end_time > other.start_time
        )

    def contains(self, other: "WeeklyWindow") -> bool:
        return (
            self.weekday == other.weekday
            and self.start_time <= other.start_time
            and other.end_time <= self.end_time
        )

    def label(self) -> str:
        return f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"

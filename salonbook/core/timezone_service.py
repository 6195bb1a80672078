# salonbook/core/timezone_service.py
"""
Centralized timezone handling for the booking engine.

Rules:
- Recurring schedules: business-local wall-clock time, no date
- All storage: UTC
- All comparisons and overlap arithmetic: UTC
- Resolution of a wall-clock time always happens against a concrete date

Daylight-saving policy:
- Ambiguous local times (fall back) resolve to the first occurrence.
- Nonexistent local times (spring forward) are rejected by local_to_utc.
  resolve_wall_time, used for recurring schedule boundaries, shifts them
  forward by the length of the gap instead.
"""

from datetime import date, datetime, time, timezone
import logging
import re
from typing import Optional

import pytz

logger = logging.getLogger(__name__)

_EXPLICIT_OFFSET = re.compile(r"([zZ]|[+-]\d{2}:?\d{2})$")


class TimezoneService:
    """Handles all timezone conversions consistently."""

    DEFAULT_TIMEZONE = "America/New_York"

    @staticmethod
    def get_timezone(tz_str: Optional[str]) -> pytz.BaseTzInfo:
        """Get timezone object, with fallback to default."""
        try:
            return pytz.timezone(tz_str or TimezoneService.DEFAULT_TIMEZONE)
        except pytz.UnknownTimeZoneError:
            logger.warning("Unknown timezone %r, using %s", tz_str, TimezoneService.DEFAULT_TIMEZONE)
            return pytz.timezone(TimezoneService.DEFAULT_TIMEZONE)

    @staticmethod
    def is_valid_timezone(tz_str: str) -> bool:
        return tz_str in pytz.all_timezones_set

    @staticmethod
    def local_to_utc(local_date: date, local_time: time, timezone_str: str) -> datetime:
        """
        Convert a local date/time to UTC.

        Uses the timezone rules valid on local_date (not today).

        Raises:
            ValueError: If the time doesn't exist (DST spring-forward gap)
        """
        tz = TimezoneService.get_timezone(timezone_str)
        naive_dt = datetime.combine(local_date, local_time)

        try:
            # is_dst=None raises for ambiguous/nonexistent times
            local_dt = tz.localize(naive_dt, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            # Fall back (time exists twice) - use first occurrence
            local_dt = tz.localize(naive_dt, is_dst=True)
        except pytz.exceptions.NonExistentTimeError:
            raise ValueError(
                f"The time {local_time.strftime('%H:%M')} does not exist on "
                f"{local_date} in {timezone_str} due to Daylight Saving Time. "
                f"Please select a different time."
            )

        return local_dt.astimezone(timezone.utc)

    @staticmethod
    def resolve_wall_time(local_date: date, local_time: time, timezone_str: str) -> datetime:
        """
        Resolve a recurring wall-clock boundary on a concrete date to UTC.

        Same as local_to_utc, except that a time inside a spring-forward gap
        is moved forward by the gap length (02:30 becomes 03:30).
        """
        try:
            return TimezoneService.local_to_utc(local_date, local_time, timezone_str)
        except ValueError:
            tz = TimezoneService.get_timezone(timezone_str)
            naive_dt = datetime.combine(local_date, local_time)
            shifted = tz.normalize(tz.localize(naive_dt, is_dst=False))
            return shifted.astimezone(timezone.utc)

    @staticmethod
    def utc_to_local(utc_dt: datetime, timezone_str: str) -> datetime:
        """Convert UTC datetime to local timezone."""
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=timezone.utc)

        tz = TimezoneService.get_timezone(timezone_str)
        return utc_dt.astimezone(tz)

    @staticmethod
    def local_date(instant: datetime, timezone_str: str) -> date:
        """Calendar date of an instant as seen in the given zone."""
        return TimezoneService.utc_to_local(instant, timezone_str).date()

    @staticmethod
    def local_today(now: datetime, timezone_str: str) -> date:
        return TimezoneService.local_date(now, timezone_str)

    @staticmethod
    def has_explicit_offset(value: str) -> bool:
        return bool(_EXPLICIT_OFFSET.search(value.strip()))

    @staticmethod
    def parse_instant(value: str) -> datetime:
        """
        Parse an ISO-8601 instant that carries an explicit offset or "Z".

        Raises:
            ValueError: If the value is unparseable or has no offset
        """
        text = value.strip()
        if not TimezoneService.has_explicit_offset(text):
            raise ValueError(f"Instant '{value}' must include a timezone offset or 'Z'")
        if text[-1] in "zZ":
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Instant '{value}' is not a valid ISO-8601 date-time") from exc
        if parsed.tzinfo is None:
            raise ValueError(f"Instant '{value}' must include a timezone offset or 'Z'")
        return parsed.astimezone(timezone.utc)

    @staticmethod
    def ensure_utc(instant: datetime) -> datetime:
        """Normalize an aware datetime to UTC; naive values are rejected."""
        if instant.tzinfo is None or instant.utcoffset() is None:
            raise ValueError("Naive datetimes are not accepted; an explicit offset is required")
        return instant.astimezone(timezone.utc)

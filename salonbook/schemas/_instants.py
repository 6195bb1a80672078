"""Shared validation for instants crossing the API boundary."""

from datetime import datetime
from typing import Any

from ..core.timezone_service import TimezoneService


def require_explicit_offset(value: Any, field_name: str) -> Any:
    """
    Accept only ISO-8601 strings with an offset (or aware datetimes built in code).

    Runs before pydantic parses the field, whose lax mode would otherwise read
    a bare number as a Unix epoch.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be an ISO-8601 date-time string")
    if not TimezoneService.has_explicit_offset(value):
        raise ValueError(f"{field_name} must include a timezone offset or 'Z'")
    return value

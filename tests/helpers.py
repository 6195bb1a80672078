"""Shared constants and builders for the test suite."""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Dict

from salonbook.core.timezone_service import TimezoneService

ZONE = "America/New_York"
# Friday 2026-10-16, 08:00 in New York
NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
CUSTOMER_ID = "customer-1"
OWNER_ID = "owner-1"
MISSING_ID = "01HF4G12ABCDEF3456789XYZAB"


@dataclass
class Salon:
    business_id: str
    provider_id: str
    provider_user_id: str
    second_provider_id: str
    second_provider_user_id: str
    haircut_id: str
    color_id: str
    owner_id: str = OWNER_ID
    customer_id: str = CUSTOMER_ID


def local(day: date, hour: int, minute: int = 0) -> datetime:
    """UTC instant of a salon-local wall-clock time."""
    return TimezoneService.local_to_utc(day, time(hour, minute), ZONE)


def actor_headers(actor_id: str, role: str) -> Dict[str, str]:
    return {"X-Actor-Id": actor_id, "X-Actor-Role": role}

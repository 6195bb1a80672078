"""Booking domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List


@dataclass
class BookingCreated:
    """Fired after a booking is committed."""

    booking_id: str
    business_id: str
    customer_id: str
    provider_ids: List[str]
    scheduled_start: datetime
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingRescheduled:
    """Fired after a reschedule commits."""

    old_booking_id: str
    new_booking_id: str
    customer_id: str
    provider_ids: List[str]
    old_start: datetime
    new_start: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BookingCancelled:
    """Fired after a booking is cancelled."""

    booking_id: str
    customer_id: str
    provider_ids: List[str]
    cancelled_by: str
    cancelled_by_role: str
    cancelled_at: datetime
    refunded_payments: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

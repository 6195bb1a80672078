"""Booking request and response schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import AwareDatetime, Field, field_validator

from ..models.booking import Booking
from ._instants import require_explicit_offset
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Create a booking; the customer is the acting party."""

    business_id: str = Field(..., min_length=1)
    provider_ids: List[str] = Field(..., min_length=1, description="Providers involved")
    service_ids: List[str] = Field(..., min_length=1, description="Services to book")
    start: AwareDatetime = Field(..., description="ISO-8601 start with explicit offset")
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("start", mode="before")
    @classmethod
    def _enforce_offset(cls, v: object) -> object:
        return require_explicit_offset(v, "start")

    @field_validator("notes")
    @classmethod
    def _clean_notes(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None


class BookingRescheduleRequest(StrictRequestModel):
    """Request to move a booking to a new start instant; duration is preserved."""

    new_start: AwareDatetime = Field(..., description="ISO-8601 start with explicit offset")

    @field_validator("new_start", mode="before")
    @classmethod
    def _enforce_offset(cls, v: object) -> object:
        return require_explicit_offset(v, "new_start")


class LineItemResponse(StrictModel):
    provider_id: str
    service_id: str
    price: Decimal
    duration_minutes: int


class BookingResponse(StrictModel):
    id: str
    business_id: str
    customer_id: str
    scheduled_start: datetime
    scheduled_end: datetime
    status: str
    notes: Optional[str] = None
    rescheduled_from_id: Optional[str] = None
    line_items: List[LineItemResponse] = Field(default_factory=list)

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            business_id=booking.business_id,
            customer_id=booking.customer_id,
            scheduled_start=booking.scheduled_start,
            scheduled_end=booking.scheduled_end,
            status=booking.status,
            notes=booking.notes,
            rescheduled_from_id=booking.rescheduled_from_id,
            line_items=[
                LineItemResponse(
                    provider_id=item.provider_id,
                    service_id=item.service_id,
                    price=item.price,
                    duration_minutes=item.duration_minutes,
                )
                for item in booking.line_items
            ],
        )


class RescheduleResponse(StrictModel):
    old_booking_id: str
    new_booking_id: str


class CancelResponse(StrictModel):
    booking_id: str
    previous_status: str
    new_status: str
    canceled_at: datetime

# salonbook/models/booking.py
"""
Booking models.

A Booking stores its interval as absolute UTC instants. The services it
covers are BookingLineItem rows, each snapshotting price and duration at
booking time and naming the provider who performs it. Reschedules never
edit a booking in place: the original is canceled and a replacement row
points back at it through rescheduled_from_id.
"""

from datetime import datetime, timezone
import logging
from typing import Any, FrozenSet, Optional

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import BookingStatus
from ..database import Base
from ..domain.schedule import TimeInterval
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class Booking(Base):
    """An appointment of one customer at one business."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    business_id = Column(String(26), ForeignKey("businesses.id"), nullable=False)
    customer_id = Column(String(64), nullable=False, index=True)

    scheduled_start = Column(UTCDateTime, nullable=False)
    scheduled_end = Column(UTCDateTime, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.SCHEDULED.value, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(UTCDateTime, nullable=True)
    canceled_at = Column(UTCDateTime, nullable=True)
    canceled_by_id = Column(String(64), nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)

    # Optional linkage when created by reschedule
    rescheduled_from_id = Column(String(26), ForeignKey("bookings.id"), nullable=True)

    business = relationship("Business")
    line_items = relationship(
        "BookingLineItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingLineItem.position",
    )
    payments = relationship("PaymentRecord", back_populates="booking")
    rescheduled_from = relationship("Booking", remote_side=[id], uselist=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'SCHEDULED', 'CANCELED', 'COMPLETED')",
            name="ck_bookings_status",
        ),
        CheckConstraint("scheduled_end > scheduled_start", name="ck_bookings_interval"),
        Index("idx_bookings_business_start", "business_id", "scheduled_start"),
        Index("idx_bookings_status_start", "status", "scheduled_start"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.SCHEDULED.value

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.scheduled_start, self.scheduled_end)

    @property
    def provider_ids(self) -> FrozenSet[str]:
        return frozenset(item.provider_id for item in self.line_items)

    @property
    def total_duration_minutes(self) -> int:
        return sum(item.duration_minutes for item in self.line_items)

    def is_status(self, status: BookingStatus) -> bool:
        return self.status == status.value

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: customer={self.customer_id}, "
            f"{self.scheduled_start.isoformat() if self.scheduled_start else None}-"
            f"{self.scheduled_end.isoformat() if self.scheduled_end else None}, "
            f"status={self.status}>"
        )


class BookingLineItem(Base):
    """One service of a booking, performed by one provider."""

    __tablename__ = "booking_line_items"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider_id = Column(String(26), ForeignKey("providers.id"), nullable=False, index=True)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Snapshot (preserved for history)
    price = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    booking = relationship("Booking", back_populates="line_items")
    provider = relationship("Provider")
    service = relationship("Service")

    __table_args__ = (
        CheckConstraint("duration_minutes >= 0", name="ck_line_items_duration"),
        CheckConstraint("price >= 0", name="ck_line_items_price"),
    )

    def clone_for(self, booking_id: Optional[str] = None) -> "BookingLineItem":
        """Copy of this line item, optionally attached to another booking."""
        return BookingLineItem(
            booking_id=booking_id,
            provider_id=self.provider_id,
            service_id=self.service_id,
            position=self.position,
            price=self.price,
            duration_minutes=self.duration_minutes,
        )

    def __repr__(self) -> str:
        return f"<BookingLineItem {self.booking_id}: provider={self.provider_id} service={self.service_id}>"

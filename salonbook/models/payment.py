# salonbook/models/payment.py
"""
Payment records as seen by the booking engine.

Capture and amounts belong to the payment collaborator; the engine only
moves a record to another booking on reschedule and flips it to REFUNDED on
cancellation.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import PaymentStatus
from ..database import Base
from .types import UTCDateTime


class PaymentRecord(Base):
    __tablename__ = "payments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(UTCDateTime, nullable=True)

    booking = relationship("Booking", back_populates="payments")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'SUCCEEDED', 'REFUNDED')", name="ck_payments_status"
        ),
        CheckConstraint("amount >= 0", name="ck_payments_amount"),
        Index("idx_payments_booking_status", "booking_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<PaymentRecord {self.id}: booking={self.booking_id} {self.amount} {self.status}>"

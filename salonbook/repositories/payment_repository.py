# salonbook/repositories/payment_repository.py
"""
Repository for the payment records the engine is allowed to touch.

Only two writes exist: moving records to another booking, and marking
them refunded.
"""

from datetime import datetime
import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import PaymentStatus
from ..core.exceptions import RepositoryException
from ..models.payment import PaymentRecord
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[PaymentRecord]):
    def __init__(self, db: Session):
        super().__init__(db, PaymentRecord)

    def list_for_booking(self, booking_id: str) -> List[PaymentRecord]:
        return self.db.query(PaymentRecord).filter(PaymentRecord.booking_id == booking_id).all()

    def repoint_booking(self, old_booking_id: str, new_booking_id: str, now: datetime) -> int:
        """Move every payment of old_booking_id to new_booking_id."""
        try:
            return (
                self.db.query(PaymentRecord)
                .filter(PaymentRecord.booking_id == old_booking_id)
                .update(
                    {"booking_id": new_booking_id, "updated_at": now},
                    synchronize_session="fetch",
                )
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error repointing payments of {old_booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to repoint payments: {str(e)}")

    def refund_for_booking(self, booking_id: str, now: datetime) -> int:
        """Mark every not-yet-refunded payment of a booking as REFUNDED."""
        try:
            return (
                self.db.query(PaymentRecord)
                .filter(
                    PaymentRecord.booking_id == booking_id,
                    PaymentRecord.status != PaymentStatus.REFUNDED.value,
                )
                .update(
                    {"status": PaymentStatus.REFUNDED.value, "updated_at": now},
                    synchronize_session="fetch",
                )
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error refunding payments of {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to refund payments: {str(e)}")

# salonbook/repositories/booking_repository.py
"""
Repository for bookings and their line items.

Holds the authoritative overlap query:
    existing.start < requested.end AND existing.end > requested.start
evaluated only over bookings that still occupy a provider's time
(PENDING and SCHEDULED).
"""

from datetime import datetime
import logging
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.enums import BLOCKING_BOOKING_STATUSES, BookingStatus
from ..core.exceptions import RepositoryException
from ..domain.schedule import TimeInterval
from ..models.booking import Booking, BookingLineItem
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_with_items(self, booking_id: str, for_update: bool = False) -> Optional[Booking]:
        """Load a booking with its line items, row-locked when requested."""
        try:
            query = (
                self.db.query(Booking)
                .options(selectinload(Booking.line_items), selectinload(Booking.business))
                .filter(Booking.id == booking_id)
            )
            if for_update and self.supports_row_locks:
                query = query.with_for_update(of=Booking)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load booking: {str(e)}")

    def find_overlapping(
        self,
        provider_ids: Iterable[str],
        interval: TimeInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Bookings of any of the providers whose interval overlaps the given one."""
        try:
            involving = select(BookingLineItem.booking_id).where(
                BookingLineItem.provider_id.in_(list(provider_ids))
            )
            query = self.db.query(Booking).filter(
                Booking.id.in_(involving),
                Booking.status.in_(BLOCKING_BOOKING_STATUSES),
                Booking.scheduled_start < interval.end,
                Booking.scheduled_end > interval.start,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return query.order_by(Booking.scheduled_start).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking booking overlap: {str(e)}")
            raise RepositoryException(f"Failed to check booking conflicts: {str(e)}")

    def get_busy_intervals(self, provider_id: str, window: TimeInterval) -> List[TimeInterval]:
        """Intervals of a provider's occupying bookings that touch the window."""
        return [booking.interval for booking in self.find_overlapping([provider_id], window)]

    def list_upcoming_for_providers(
        self, provider_ids: Sequence[str], now: datetime
    ) -> List[Booking]:
        involving = select(BookingLineItem.booking_id).where(
            BookingLineItem.provider_id.in_(list(provider_ids))
        )
        return (
            self.db.query(Booking)
            .filter(
                Booking.id.in_(involving),
                Booking.status.in_(BLOCKING_BOOKING_STATUSES),
                Booking.scheduled_end > now,
            )
            .all()
        )

    def list_upcoming_for_business(self, business_id: str, now: datetime) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.business_id == business_id,
                Booking.status.in_(BLOCKING_BOOKING_STATUSES),
                Booking.scheduled_end > now,
            )
            .all()
        )

    def transition_status(
        self,
        booking_id: str,
        from_status: BookingStatus,
        to_status: BookingStatus,
        **values: Any,
    ) -> int:
        """
        Conditionally move a booking between statuses.

        Returns the number of rows changed; zero means another writer got
        there first.
        """
        try:
            changes = {"status": to_status.value, **values}
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id, Booking.status == from_status.value)
                .update(changes, synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating booking {booking_id} status: {str(e)}")
            raise RepositoryException(f"Failed to update booking status: {str(e)}")

    def complete_elapsed(self, now: datetime) -> int:
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.status == BookingStatus.SCHEDULED.value,
                    Booking.scheduled_end <= now,
                )
                .update(
                    {
                        "status": BookingStatus.COMPLETED.value,
                        "completed_at": now,
                        "updated_at": now,
                    },
                    synchronize_session="fetch",
                )
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error completing elapsed bookings: {str(e)}")
            raise RepositoryException(f"Failed to complete bookings: {str(e)}")

    def add_with_items(self, booking: Booking, line_items: Sequence[BookingLineItem]) -> Booking:
        """Insert a booking and its line items in one flush."""
        try:
            booking.line_items = list(line_items)
            self.db.add(booking)
            self.db.flush()
            return booking
        except SQLAlchemyError as e:
            self.logger.error(f"Error inserting booking: {str(e)}")
            raise RepositoryException(f"Failed to insert booking: {str(e)}")

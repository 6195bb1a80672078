# salonbook/services/reschedule_service.py
"""
Reschedule Service

A reschedule cancels the original booking and creates a replacement at the
new instant in one transaction:

1. Conditionally move the original SCHEDULED -> CANCELED.
2. Carry the original duration over to the new start.
3. Re-run schedule fit and overlap validation for every provider,
   ignoring the original's own row.
4. Insert the replacement with cloned line items and move every payment
   record onto it.

Any failure rolls the whole transaction back, which restores the original
booking untouched.
"""

from datetime import datetime, timedelta
import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.enums import BookingStatus, Capability
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.permissions import Actor, require_capability
from ..domain.schedule import TimeInterval
from ..events import BookingRescheduled, EventPublisher, default_publisher
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from .base import BaseService
from .booking_policy import enforce_same_day_lock
from .conflict_checker import ConflictChecker
from .reservation_service import parse_requested_start

logger = logging.getLogger(__name__)


class RescheduleService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        publisher: Optional[EventPublisher] = None,
        conflict_checker: Optional[ConflictChecker] = None,
    ):
        super().__init__(db, clock)
        self.publisher = publisher or default_publisher()
        self.conflict_checker = conflict_checker or ConflictChecker(db, self.clock)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.provider_repository = RepositoryFactory.create_provider_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    @BaseService.measure_operation("reschedule_booking")
    def reschedule_booking(
        self,
        booking_id: str,
        customer_id: str,
        new_start: datetime,
        actor: Optional[Actor] = None,
    ) -> Dict[str, str]:
        """
        Move a customer's booking to a new start instant.

        Returns:
            {"old_booking_id": ..., "new_booking_id": ...}

        Raises:
            ValidationException: Naive or past new start
            NotFoundException: Booking absent or not owned by the customer
            ConflictException: Booking no longer SCHEDULED, or changed concurrently
            SameDayLockException: The original appointment's local day has arrived
            BusinessRuleException: New interval outside availability
            BookingConflictException: New interval overlaps another booking
        """
        start = parse_requested_start(new_start)
        if actor is not None:
            require_capability(actor, Capability.RESCHEDULE_BOOKING)
            if actor.id != customer_id:
                raise ForbiddenException("Customers may only reschedule their own bookings")
        now = self.now()
        if start <= now:
            raise ValidationException(
                "New start must be in the future", details={"new_start": start.isoformat()}
            )

        with self.transaction():
            original = self.booking_repository.get_with_items(booking_id, for_update=True)
            if original is None or original.customer_id != customer_id:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            if not original.is_status(BookingStatus.SCHEDULED):
                raise ConflictException(
                    f"Only scheduled bookings can be rescheduled (status is {original.status})",
                    code="BOOKING_NOT_SCHEDULED",
                    details={"booking_id": booking_id, "status": original.status},
                )
            zone = original.business.timezone
            enforce_same_day_lock(original, zone, now, "reschedule")

            old_start = original.scheduled_start
            line_items = list(original.line_items)
            provider_ids = sorted(original.provider_ids)

            changed = self.booking_repository.transition_status(
                booking_id,
                BookingStatus.SCHEDULED,
                BookingStatus.CANCELED,
                canceled_at=now,
                canceled_by_id=customer_id,
                updated_at=now,
            )
            if changed == 0:
                raise ConflictException(
                    "Booking was changed by another request",
                    code="BOOKING_CHANGED",
                    details={"booking_id": booking_id},
                )

            interval = TimeInterval(
                start, start + timedelta(minutes=sum(item.duration_minutes for item in line_items))
            )
            providers = self.provider_repository.get_many(provider_ids)
            inactive = [provider.id for provider in providers if not provider.active]
            if inactive:
                raise BusinessRuleException(
                    "Provider is not active",
                    code="PROVIDER_INACTIVE",
                    details={"provider_ids": inactive},
                )
            self.conflict_checker.validate_interval(
                providers, interval, zone, exclude_booking_id=booking_id
            )

            replacement = self.booking_repository.add_with_items(
                Booking(
                    business_id=original.business_id,
                    customer_id=original.customer_id,
                    scheduled_start=interval.start,
                    scheduled_end=interval.end,
                    status=BookingStatus.SCHEDULED.value,
                    notes=original.notes,
                    rescheduled_from_id=original.id,
                ),
                [item.clone_for() for item in line_items],
            )
            moved = self.payment_repository.repoint_booking(original.id, replacement.id, now)

        result = {"old_booking_id": booking_id, "new_booking_id": replacement.id}
        self.log_operation("reschedule_booking", payments_moved=moved, **result)
        self.publisher.publish(
            BookingRescheduled(
                old_booking_id=booking_id,
                new_booking_id=replacement.id,
                customer_id=customer_id,
                provider_ids=provider_ids,
                old_start=old_start,
                new_start=interval.start,
            )
        )
        return result

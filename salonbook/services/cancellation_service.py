# salonbook/services/cancellation_service.py
"""
Cancellation Service

Enforces the cancellation policy and drives the booking and payment state
transition in a single transaction.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.enums import BookingStatus, Capability, RoleName
from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..core.permissions import Actor, ResourceScope, actor_owns, require_capability
from ..events import BookingCancelled, EventPublisher, default_publisher
from ..models.booking import Booking
from ..repositories import RepositoryFactory
from .base import BaseService
from .booking_policy import enforce_same_day_lock

logger = logging.getLogger(__name__)


def booking_scope(booking: Booking) -> ResourceScope:
    return ResourceScope(
        customer_id=booking.customer_id,
        provider_user_ids=frozenset(item.provider.user_id for item in booking.line_items),
        owner_id=booking.business.owner_id if booking.business else None,
    )


class CancellationService(BaseService):
    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(db, clock)
        self.publisher = publisher or default_publisher()
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, booking_id: str, actor_id: str, actor_role: Union[RoleName, str]
    ) -> Dict[str, Any]:
        """
        Cancel a SCHEDULED booking and refund its payments.

        A customer must own the booking, a provider must perform one of its
        line items, an owner must own the business. Cancelling twice is an
        error, not a no-op.

        Returns:
            booking_id, previous_status, new_status and canceled_at
        """
        try:
            actor = Actor(id=actor_id, role=RoleName(actor_role))
        except ValueError as exc:
            raise ValidationException(f"Unknown role: {actor_role}") from exc
        require_capability(actor, Capability.CANCEL_BOOKING)

        now: datetime = self.now()
        with self.transaction():
            booking = self.booking_repository.get_with_items(booking_id, for_update=True)
            if booking is None or not actor_owns(actor, booking_scope(booking)):
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            previous_status = booking.status
            if previous_status != BookingStatus.SCHEDULED.value:
                raise ConflictException(
                    f"Only scheduled bookings can be canceled (status is {previous_status})",
                    code="BOOKING_NOT_SCHEDULED",
                    details={"booking_id": booking_id, "status": previous_status},
                )
            enforce_same_day_lock(booking, booking.business.timezone, now, "cancel")

            changed = self.booking_repository.transition_status(
                booking_id,
                BookingStatus.SCHEDULED,
                BookingStatus.CANCELED,
                canceled_at=now,
                canceled_by_id=actor.id,
                updated_at=now,
            )
            if changed == 0:
                raise ConflictException(
                    "Booking was changed by another request",
                    code="BOOKING_CHANGED",
                    details={"booking_id": booking_id},
                )
            refunded = self.payment_repository.refund_for_booking(booking_id, now)
            provider_ids = sorted(booking.provider_ids)

        self.log_operation(
            "cancel_booking",
            booking_id=booking_id,
            actor_id=actor.id,
            actor_role=actor.role.value,
            refunded_payments=refunded,
        )
        self.publisher.publish(
            BookingCancelled(
                booking_id=booking_id,
                customer_id=booking.customer_id,
                provider_ids=provider_ids,
                cancelled_by=actor.id,
                cancelled_by_role=actor.role.value,
                cancelled_at=now,
                refunded_payments=refunded,
            )
        )
        return {
            "booking_id": booking_id,
            "previous_status": previous_status,
            "new_status": BookingStatus.CANCELED.value,
            "canceled_at": now,
        }

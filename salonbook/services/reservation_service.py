# salonbook/services/reservation_service.py
"""
Reservation Service

Owns the booking state machine:

    (new) --> PENDING --confirm--> SCHEDULED --elapsed--> COMPLETED
    (new) --------------------->  SCHEDULED --cancel/reschedule--> CANCELED
    PENDING --abort--> (deleted)

create_booking is the authoritative write path: it re-validates schedule
fit and overlap under the provider lock no matter what a client saw in a
slot listing.
"""

from datetime import datetime, timedelta
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.config import settings
from ..core.enums import BookingStatus, Capability
from ..core.exceptions import (
    BusinessRuleException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.permissions import Actor, require_capability
from ..core.timezone_service import TimezoneService
from ..domain.schedule import TimeInterval
from ..events import BookingCreated, EventPublisher, default_publisher
from ..models.booking import Booking, BookingLineItem
from ..models.business import Business
from ..models.provider import Provider, Service
from ..repositories import RepositoryFactory
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)


def pair_services_with_providers(
    provider_ids: Sequence[str], service_ids: Sequence[str]
) -> List[Tuple[str, str]]:
    """
    Decide which provider performs which service.

    One provider performs every service; otherwise providers and services
    are paired by position and must have the same length.
    """
    if not provider_ids:
        raise ValidationException("At least one provider is required")
    if not service_ids:
        raise ValidationException("At least one service is required")
    if len(set(provider_ids)) != len(provider_ids):
        raise ValidationException("Provider ids must be unique")
    if len(provider_ids) == 1:
        return [(provider_ids[0], service_id) for service_id in service_ids]
    if len(provider_ids) != len(service_ids):
        raise ValidationException(
            "With several providers, supply exactly one service per provider",
            details={"providers": len(provider_ids), "services": len(service_ids)},
        )
    return list(zip(provider_ids, service_ids))


def parse_requested_start(value: datetime) -> datetime:
    try:
        return TimezoneService.ensure_utc(value)
    except ValueError as exc:
        raise ValidationException(str(exc), code="MISSING_TIMEZONE_OFFSET") from exc


class ReservationService(BaseService):
    """
    Service for creating and confirming bookings.

    Every public mutation runs in one transaction; events are published only
    after that transaction has committed.
    """

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
        self.business_repository = RepositoryFactory.create_business_repository(db)
        self.provider_repository = RepositoryFactory.create_provider_repository(db)
        self.service_repository = RepositoryFactory.create_service_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        business_id: str,
        provider_ids: Sequence[str],
        service_ids: Sequence[str],
        requested_start: datetime,
        customer_id: str,
        notes: Optional[str] = None,
        actor: Optional[Actor] = None,
        hold_for_payment: Optional[bool] = None,
    ) -> Booking:
        """
        Validate and commit a new booking.

        Raises:
            ValidationException: Naive or past start, bad provider/service lists, zero duration
            NotFoundException: Unknown business, provider or service
            BusinessRuleException: Business not bookable, inactive provider or service,
                service not offered, interval outside availability
            BookingConflictException: Overlap with an existing booking
        """
        start = parse_requested_start(requested_start)
        assignments = pair_services_with_providers(list(provider_ids), list(service_ids))
        if actor is not None:
            require_capability(actor, Capability.CREATE_BOOKING)
            if actor.id != customer_id:
                raise ForbiddenException("Customers may only book for themselves")
        if start <= self.now():
            raise ValidationException(
                "Booking start must be in the future", details={"requested_start": start.isoformat()}
            )
        if hold_for_payment is None:
            hold_for_payment = settings.hold_bookings_for_payment

        with self.transaction():
            business = self._get_bookable_business(business_id)
            providers = self._load_providers(business, [provider_id for provider_id, _ in assignments])
            services = self._load_services(business, [service_id for _, service_id in assignments])

            line_items = []
            for position, (provider_id, service_id) in enumerate(assignments):
                provider = providers[provider_id]
                service = services[service_id]
                if not provider.offers(service.id):
                    raise BusinessRuleException(
                        "Provider does not offer this service",
                        code="SERVICE_NOT_OFFERED",
                        details={"provider_id": provider.id, "service_id": service.id},
                    )
                line_items.append(
                    BookingLineItem(
                        provider_id=provider.id,
                        service_id=service.id,
                        position=position,
                        price=service.price,
                        duration_minutes=service.duration_minutes,
                    )
                )

            total_minutes = sum(item.duration_minutes for item in line_items)
            if total_minutes <= 0:
                raise ValidationException("Selected services have no duration")
            interval = TimeInterval(start, start + timedelta(minutes=total_minutes))

            self.conflict_checker.validate_interval(
                list(providers.values()), interval, business.timezone
            )

            status = BookingStatus.PENDING if hold_for_payment else BookingStatus.SCHEDULED
            booking = self.booking_repository.add_with_items(
                Booking(
                    business_id=business.id,
                    customer_id=customer_id,
                    scheduled_start=interval.start,
                    scheduled_end=interval.end,
                    status=status.value,
                    notes=notes,
                ),
                line_items,
            )

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            customer_id=customer_id,
            provider_ids=sorted(providers),
            status=booking.status,
        )
        self.publisher.publish(
            BookingCreated(
                booking_id=booking.id,
                business_id=booking.business_id,
                customer_id=customer_id,
                provider_ids=sorted(providers),
                scheduled_start=booking.scheduled_start,
                status=booking.status,
            )
        )
        return booking

    @BaseService.measure_operation("confirm_booking")
    def confirm_booking(self, booking_id: str, actor: Optional[Actor] = None) -> Booking:
        """Move a PENDING booking to SCHEDULED once payment has been captured."""
        if actor is not None:
            require_capability(actor, Capability.CONFIRM_BOOKING)

        with self.transaction():
            booking = self.booking_repository.get_with_items(booking_id, for_update=True)
            if booking is None:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})
            changed = self.booking_repository.transition_status(
                booking_id, BookingStatus.PENDING, BookingStatus.SCHEDULED, updated_at=self.now()
            )
            if changed == 0:
                raise ConflictException(
                    f"Booking is {booking.status}, only PENDING bookings can be confirmed",
                    code="BOOKING_NOT_PENDING",
                    details={"booking_id": booking_id, "status": booking.status},
                )

        self.log_operation("confirm_booking", booking_id=booking_id)
        return booking

    @BaseService.measure_operation("abort_pending_booking")
    def abort_pending_booking(self, booking_id: str, customer_id: str) -> None:
        """Delete a PENDING booking of this customer together with its line items."""
        with self.transaction():
            booking = self.booking_repository.get_with_items(booking_id, for_update=True)
            if (
                booking is None
                or booking.customer_id != customer_id
                or not booking.is_status(BookingStatus.PENDING)
            ):
                raise NotFoundException(
                    "Pending booking not found", details={"booking_id": booking_id}
                )
            if self.payment_repository.list_for_booking(booking_id):
                raise ConflictException(
                    "Booking already has payment records",
                    code="BOOKING_HAS_PAYMENTS",
                    details={"booking_id": booking_id},
                )
            self.booking_repository.delete(booking_id)

        self.log_operation("abort_pending_booking", booking_id=booking_id, customer_id=customer_id)

    @BaseService.measure_operation("complete_elapsed_bookings")
    def complete_elapsed_bookings(self) -> int:
        """Mark every SCHEDULED booking that has ended as COMPLETED."""
        with self.transaction():
            completed = self.booking_repository.complete_elapsed(self.now())
        if completed:
            self.log_operation("complete_elapsed_bookings", completed=completed)
        return completed

    def _get_bookable_business(self, business_id: str) -> Business:
        business = self.business_repository.get_by_id(business_id)
        if business is None:
            raise NotFoundException("Business not found", details={"business_id": business_id})
        if not business.is_bookable:
            raise BusinessRuleException(
                "Business is not accepting bookings",
                code="BUSINESS_NOT_BOOKABLE",
                details={"business_id": business_id, "status": business.status},
            )
        return business

    def _load_providers(self, business: Business, provider_ids: Sequence[str]) -> Dict[str, Provider]:
        found = {
            provider.id: provider
            for provider in self.provider_repository.get_many(provider_ids)
            if provider.business_id == business.id
        }
        missing = [provider_id for provider_id in provider_ids if provider_id not in found]
        if missing:
            raise NotFoundException("Provider not found", details={"provider_ids": missing})
        inactive = [provider.id for provider in found.values() if not provider.active]
        if inactive:
            raise BusinessRuleException(
                "Provider is not active", code="PROVIDER_INACTIVE", details={"provider_ids": inactive}
            )
        return found

    def _load_services(self, business: Business, service_ids: Sequence[str]) -> Dict[str, Service]:
        found = {
            service.id: service
            for service in self.service_repository.get_many(service_ids)
            if service.business_id == business.id
        }
        missing = sorted({service_id for service_id in service_ids if service_id not in found})
        if missing:
            raise NotFoundException("Service not found", details={"service_ids": missing})
        inactive = [service.id for service in found.values() if not service.active]
        if inactive:
            raise BusinessRuleException(
                "Service is not available", code="SERVICE_INACTIVE", details={"service_ids": inactive}
            )
        return found

# salonbook/services/slot_service.py
"""
Slot Service

Computes bookable start instants for one provider over a range of
business-local calendar days. Per date:

1. Resolve each AvailabilityWindow of that weekday to an absolute interval.
2. Subtract resolved UnavailabilityWindows and occupying bookings.
3. Walk each free sub-interval at the window's slot granularity and emit
   every start whose [start, start + duration) fits inside it.

The result is advisory only. Nothing is cached between calls, and booking
re-validates everything under lock.
"""

from datetime import date, datetime, timedelta
import logging
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.config import settings
from ..core.enums import Capability
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..core.permissions import Actor, require_capability
from ..core.timezone_service import TimezoneService
from ..domain.schedule import TimeInterval
from ..models.business import Business
from ..models.provider import Provider
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class SlotService(BaseService):
    """Read-only calculator of candidate booking starts."""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.business_repository = RepositoryFactory.create_business_repository(db)
        self.provider_repository = RepositoryFactory.create_provider_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("list_available_slots")
    def list_available_slots(
        self,
        business_id: str,
        provider_id: str,
        duration_minutes: int,
        start_date: Optional[date] = None,
        days: Optional[int] = None,
        actor: Optional[Actor] = None,
    ) -> Iterator[datetime]:
        """
        Return a lazy, single-pass iterator of UTC start instants.

        Input and reference data are validated eagerly; the per-date work
        happens as the caller consumes the iterator.

        Raises:
            ValidationException: Non-positive duration, bad range, or a start date in the past
            NotFoundException: Unknown business or provider
            BusinessRuleException: Business not accepting bookings, provider inactive
        """
        if actor is not None:
            require_capability(actor, Capability.VIEW_AVAILABILITY)
        if duration_minutes <= 0:
            raise ValidationException(
                "Duration must be a positive number of minutes",
                details={"duration_minutes": duration_minutes},
            )
        days = settings.default_slot_range_days if days is None else days
        if days <= 0 or days > settings.max_slot_range_days:
            raise ValidationException(
                f"Date range must cover between 1 and {settings.max_slot_range_days} days",
                details={"days": days},
            )

        owns_transaction = self.begin_read()
        try:
            business, provider = self._load_bookable_provider(business_id, provider_id)
            zone = business.timezone
            today = TimezoneService.local_today(self.now(), zone)
            if start_date is None:
                start_date = today
            elif start_date < today:
                raise ValidationException(
                    "Start date cannot be in the past",
                    details={"start_date": start_date.isoformat(), "today": today.isoformat()},
                )
        except Exception:
            self.end_read(owns_transaction)
            raise

        self.log_operation(
            "list_available_slots",
            provider_id=provider.id,
            start_date=start_date.isoformat(),
            days=days,
            duration_minutes=duration_minutes,
        )
        return self._iter_slots(
            provider, zone, start_date, days, timedelta(minutes=duration_minutes), owns_transaction
        )

    def _load_bookable_provider(self, business_id: str, provider_id: str):
        business: Optional[Business] = self.business_repository.get_by_id(business_id)
        if business is None:
            raise NotFoundException("Business not found", details={"business_id": business_id})
        if not business.is_bookable:
            raise BusinessRuleException(
                "Business is not accepting bookings",
                code="BUSINESS_NOT_BOOKABLE",
                details={"business_id": business_id, "status": business.status},
            )
        provider: Optional[Provider] = self.provider_repository.get_by_id(provider_id)
        if provider is None or provider.business_id != business.id:
            raise NotFoundException("Provider not found", details={"provider_id": provider_id})
        if not provider.active:
            raise BusinessRuleException(
                "Provider is not active", code="PROVIDER_INACTIVE", details={"provider_id": provider_id}
            )
        return business, provider

    def _iter_slots(
        self,
        provider: Provider,
        zone: str,
        start_date: date,
        days: int,
        duration: timedelta,
        owns_transaction: bool,
    ) -> Iterator[datetime]:
        try:
            for offset in range(days):
                calendar_date = start_date + timedelta(days=offset)
                yield from self.slots_for_date(provider, zone, calendar_date, duration)
        finally:
            self.end_read(owns_transaction)

    def slots_for_date(
        self, provider: Provider, zone: str, calendar_date: date, duration: timedelta
    ) -> Iterator[datetime]:
        """Candidate starts on one local calendar date, ascending."""
        now = self.now()
        weekday = calendar_date.weekday()

        blocks: List[TimeInterval] = []
        for block in self.availability_repository.get_blocks(provider.id, weekday):
            resolved = block.to_window().resolve(calendar_date, zone)
            if resolved is not None:
                blocks.append(resolved)

        for row in self.availability_repository.get_windows(provider.id, weekday):
            window = row.to_window().resolve(calendar_date, zone)
            if window is None:
                continue
            busy = self.booking_repository.get_busy_intervals(provider.id, window)
            step = timedelta(
                minutes=row.slot_interval_minutes or settings.default_slot_interval_minutes
            )
            for free in window.subtract(blocks + busy):
                for start in free.iter_starts(duration, step):
                    if start > now:
                        yield start

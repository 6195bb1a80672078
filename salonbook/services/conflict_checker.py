# salonbook/services/conflict_checker.py
"""
Conflict Checker Service

Write-time validation shared by booking, rescheduling and any other
operation that claims a provider's time:
- The interval must fit one AvailabilityWindow of the provider on the
  local weekday of its start, and intersect no UnavailabilityWindow.
- No PENDING or SCHEDULED booking of the provider may overlap it.

The overlap query runs only after the provider lock is held, so two writers
competing for the same interval cannot both see "no conflict". Results from
SlotService are never trusted here.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.exceptions import BookingConflictException, OutsideAvailabilityException
from ..core.timezone_service import TimezoneService
from ..domain.schedule import TimeInterval
from ..models.booking import Booking
from ..models.provider import Provider
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts and schedule fit.

    Runs inside the caller's transaction; it never commits.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.provider_repository = RepositoryFactory.create_provider_repository(db)

    def check_schedule_fit(self, provider: Provider, interval: TimeInterval, zone: str) -> None:
        """
        Raise OutsideAvailabilityException unless the interval fits the provider's week.

        Windows are resolved against the local calendar date of the interval's
        start, so an interval running past local midnight never fits.
        """
        local_date = TimezoneService.local_date(interval.start, zone)
        weekday = local_date.weekday()

        windows = [
            row.to_window().resolve(local_date, zone)
            for row in self.availability_repository.get_windows(provider.id, weekday)
        ]
        if not any(window is not None and window.contains(interval) for window in windows):
            raise OutsideAvailabilityException(
                provider.id,
                "requested time is outside working hours",
                details={"local_date": local_date.isoformat()},
            )

        for block in self.availability_repository.get_blocks(provider.id, weekday):
            resolved = block.to_window().resolve(local_date, zone)
            if resolved is not None and resolved.overlaps(interval):
                raise OutsideAvailabilityException(
                    provider.id,
                    "requested time falls inside an unavailability window",
                    details={"local_date": local_date.isoformat(), "block": block.to_window().label()},
                )

    def check_booking_conflicts(
        self,
        provider_ids: Iterable[str],
        interval: TimeInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """Raise BookingConflictException if any occupying booking overlaps the interval."""
        conflicts: List[Booking] = self.booking_repository.find_overlapping(
            provider_ids, interval, exclude_booking_id=exclude_booking_id
        )
        if conflicts:
            self.logger.info(
                "Booking conflict detected",
                extra={
                    "requested_start": interval.start.isoformat(),
                    "conflicting_booking_ids": [booking.id for booking in conflicts],
                },
            )
            raise BookingConflictException(
                details={
                    "requested_start": interval.start.isoformat(),
                    "requested_end": interval.end.isoformat(),
                    "conflicting_booking_ids": [booking.id for booking in conflicts],
                }
            )

    @BaseService.measure_operation("validate_interval")
    def validate_interval(
        self,
        providers: Sequence[Provider],
        interval: TimeInterval,
        zone: str,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """
        Full write-time validation for every involved provider.

        Order matters: schedule fit first, then the provider lock, then the
        overlap scan under that lock.
        """
        for provider in providers:
            self.check_schedule_fit(provider, interval, zone)

        provider_ids = [provider.id for provider in providers]
        self.provider_repository.lock_providers(provider_ids)
        self.check_booking_conflicts(provider_ids, interval, exclude_booking_id=exclude_booking_id)

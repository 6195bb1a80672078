# salonbook/services/schedule_service.py
"""
Schedule Service

Administers the recurring reference data the engine books against:
- Business hours (per business, per weekday)
- Provider availability, which must lie within business hours
- Provider unavailability blocks, which must lie within availability

These are the edges where containment between the three layers is
enforced; bookings never re-derive it.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Set

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.enums import Capability
from ..core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    ScheduleOverlapException,
    ValidationException,
)
from ..core.permissions import Actor, ResourceScope, actor_owns, require_capability
from ..core.timezone_service import TimezoneService
from ..domain.schedule import WeeklyWindow
from ..models.availability import AvailabilityWindow, UnavailabilityWindow
from ..models.booking import Booking
from ..models.business import Business, BusinessHours
from ..models.provider import Provider
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


def _check_no_overlap(windows: Sequence[WeeklyWindow]) -> None:
    ordered = sorted(windows, key=lambda w: (w.weekday, w.start_time))
    for previous, current in zip(ordered, ordered[1:]):
        if previous.overlaps(current):
            raise ValidationException(
                f"Windows {previous.label()} and {current.label()} overlap on weekday "
                f"{current.weekday}",
                code="OVERLAPPING_WINDOWS",
                details={"weekday": current.weekday},
            )


def _fits_any(window: WeeklyWindow, containers: Iterable[WeeklyWindow]) -> bool:
    return any(container.contains(window) for container in containers)


class ScheduleService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock)
        self.business_repository = RepositoryFactory.create_business_repository(db)
        self.provider_repository = RepositoryFactory.create_provider_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    # Business hours

    @BaseService.measure_operation("set_business_hours")
    def set_business_hours(
        self, business_id: str, actor: Actor, windows: Sequence[WeeklyWindow]
    ) -> List[BusinessHours]:
        """
        Replace the weekly operating hours of a business.

        Rejected when a weekday with upcoming bookings would disappear, or
        when a provider's availability would no longer fit.
        """
        require_capability(actor, Capability.MANAGE_BUSINESS_HOURS)
        _check_no_overlap(windows)

        with self.transaction():
            business = self._get_business(business_id)
            if not actor_owns(actor, ResourceScope(owner_id=business.owner_id)):
                raise ForbiddenException("You can only manage hours of your own business")

            current = self.business_repository.get_hours(business_id)
            removed = {row.weekday for row in current} - {window.weekday for window in windows}
            self._reject_removed_weekdays_with_bookings(
                removed,
                self.booking_repository.list_upcoming_for_business(business_id, self.now()),
                business.timezone,
            )

            for provider in business.providers:
                for row in self.availability_repository.get_windows(provider.id):
                    if not _fits_any(row.to_window(), windows):
                        raise BusinessRuleException(
                            f"Availability {row.to_window().label()} of provider {provider.id} "
                            f"would fall outside business hours",
                            code="AVAILABILITY_OUTSIDE_HOURS",
                            details={"provider_id": provider.id, "weekday": row.weekday},
                        )

            hours = self.business_repository.replace_hours(
                business_id,
                [
                    BusinessHours(weekday=w.weekday, start_time=w.start_time, end_time=w.end_time)
                    for w in windows
                ],
            )

        self.log_operation("set_business_hours", business_id=business_id, windows=len(hours))
        return hours

    def get_business_hours(self, business_id: str) -> List[BusinessHours]:
        self._get_business(business_id)
        return self.business_repository.get_hours(business_id)

    # Provider availability

    @BaseService.measure_operation("set_provider_availability")
    def set_provider_availability(
        self,
        provider_id: str,
        actor: Actor,
        windows: Sequence[WeeklyWindow],
        slot_interval_minutes: Optional[int] = None,
    ) -> List[AvailabilityWindow]:
        """Replace the weekly availability of a provider."""
        require_capability(actor, Capability.MANAGE_AVAILABILITY)
        if slot_interval_minutes is not None and slot_interval_minutes <= 0:
            raise ValidationException("Slot interval must be a positive number of minutes")
        _check_no_overlap(windows)

        with self.transaction():
            provider = self._get_managed_provider(provider_id, actor)
            business = provider.business
            hours = [row.to_window() for row in self.business_repository.get_hours(business.id)]
            for window in windows:
                if not _fits_any(window, hours):
                    raise BusinessRuleException(
                        f"Availability {window.label()} on weekday {window.weekday} is outside "
                        f"business hours",
                        code="AVAILABILITY_OUTSIDE_HOURS",
                        details={"weekday": window.weekday, "window": window.label()},
                    )

            current = self.availability_repository.get_windows(provider_id)
            removed = {row.weekday for row in current} - {window.weekday for window in windows}
            self._reject_removed_weekdays_with_bookings(
                removed,
                self.booking_repository.list_upcoming_for_providers([provider_id], self.now()),
                business.timezone,
            )

            for block in self.availability_repository.get_blocks(provider_id):
                if not _fits_any(block.to_window(), windows):
                    raise BusinessRuleException(
                        f"Unavailability block {block.to_window().label()} on weekday "
                        f"{block.weekday} would fall outside availability",
                        code="BLOCK_OUTSIDE_AVAILABILITY",
                        details={"block_id": block.id, "weekday": block.weekday},
                    )

            created = self.availability_repository.replace_windows(
                provider_id,
                [
                    AvailabilityWindow(
                        weekday=w.weekday,
                        start_time=w.start_time,
                        end_time=w.end_time,
                        slot_interval_minutes=slot_interval_minutes,
                    )
                    for w in windows
                ],
            )

        self.log_operation("set_provider_availability", provider_id=provider_id, windows=len(created))
        return created

    def get_provider_availability(self, provider_id: str) -> List[AvailabilityWindow]:
        self._get_provider(provider_id)
        return self.availability_repository.get_windows(provider_id)

    # Unavailability blocks

    @BaseService.measure_operation("add_unavailability")
    def add_unavailability(
        self, provider_id: str, actor: Actor, window: WeeklyWindow
    ) -> UnavailabilityWindow:
        """Add a recurring blocked range inside one of the provider's availability windows."""
        require_capability(actor, Capability.MANAGE_AVAILABILITY)

        with self.transaction():
            self._get_managed_provider(provider_id, actor)
            availability = [
                row.to_window()
                for row in self.availability_repository.get_windows(provider_id, window.weekday)
            ]
            if not _fits_any(window, availability):
                raise BusinessRuleException(
                    f"Block {window.label()} is outside the provider's availability on weekday "
                    f"{window.weekday}",
                    code="BLOCK_OUTSIDE_AVAILABILITY",
                    details={"weekday": window.weekday, "window": window.label()},
                )
            for existing in self.availability_repository.get_blocks(provider_id, window.weekday):
                if existing.to_window().overlaps(window):
                    raise ScheduleOverlapException(
                        window.weekday, window.label(), existing.to_window().label()
                    )
            block = self.availability_repository.add_block(
                UnavailabilityWindow(
                    provider_id=provider_id,
                    weekday=window.weekday,
                    start_time=window.start_time,
                    end_time=window.end_time,
                )
            )

        self.log_operation("add_unavailability", provider_id=provider_id, block_id=block.id)
        return block

    def list_unavailability(self, provider_id: str) -> List[UnavailabilityWindow]:
        self._get_provider(provider_id)
        return self.availability_repository.get_blocks(provider_id)

    @BaseService.measure_operation("remove_unavailability")
    def remove_unavailability(self, provider_id: str, block_id: str, actor: Actor) -> None:
        require_capability(actor, Capability.MANAGE_AVAILABILITY)

        with self.transaction():
            self._get_managed_provider(provider_id, actor)
            block = self.availability_repository.get_block(block_id)
            if block is None or block.provider_id != provider_id:
                raise NotFoundException(
                    "Unavailability block not found", details={"block_id": block_id}
                )
            self.availability_repository.delete_block(block)

        self.log_operation("remove_unavailability", provider_id=provider_id, block_id=block_id)

    # Helpers

    def _get_business(self, business_id: str) -> Business:
        business = self.business_repository.get_by_id(business_id)
        if business is None:
            raise NotFoundException("Business not found", details={"business_id": business_id})
        return business

    def _get_provider(self, provider_id: str) -> Provider:
        provider = self.provider_repository.get_with_services(provider_id)
        if provider is None:
            raise NotFoundException("Provider not found", details={"provider_id": provider_id})
        return provider

    def _get_managed_provider(self, provider_id: str, actor: Actor) -> Provider:
        provider = self._get_provider(provider_id)
        scope = ResourceScope(
            provider_user_ids=frozenset({provider.user_id}),
            owner_id=provider.business.owner_id,
        )
        if not actor_owns(actor, scope):
            raise ForbiddenException("You can only manage your own schedule")
        return provider

    @staticmethod
    def _reject_removed_weekdays_with_bookings(
        removed: Set[int], upcoming: Iterable[Booking], zone: str
    ) -> None:
        if not removed:
            return
        for booking in upcoming:
            weekday = TimezoneService.local_date(booking.scheduled_start, zone).weekday()
            if weekday in removed:
                raise BusinessRuleException(
                    f"Cannot remove weekday {weekday}: it has upcoming bookings",
                    code="WEEKDAY_HAS_BOOKINGS",
                    details={"weekday": weekday, "booking_id": booking.id},
                )

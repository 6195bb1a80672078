"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.clock import Clock, SystemClock
from ...events import EventPublisher, default_publisher
from ...services.cancellation_service import CancellationService
from ...services.conflict_checker import ConflictChecker
from ...services.reschedule_service import RescheduleService
from ...services.reservation_service import ReservationService
from ...services.schedule_service import ScheduleService
from ...services.slot_service import SlotService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _system_clock() -> SystemClock:
    return SystemClock()


@lru_cache(maxsize=1)
def _publisher_singleton() -> EventPublisher:
    return default_publisher()


def get_clock() -> Clock:
    """Source of "now"; tests override this with a FixedClock."""
    return _system_clock()


def get_publisher() -> EventPublisher:
    return _publisher_singleton()


def get_conflict_checker(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ConflictChecker:
    return ConflictChecker(db, clock)


def get_slot_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> SlotService:
    return SlotService(db, clock)


def get_reservation_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    publisher: EventPublisher = Depends(get_publisher),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> ReservationService:
    """
    Get ReservationService instance.

    Args:
        db: Database session
        clock: Source of "now"
        publisher: Receives booking events after commit
        conflict_checker: Schedule fit and overlap validation

    Returns:
        ReservationService instance
    """
    return ReservationService(db, clock, publisher, conflict_checker)


def get_reschedule_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    publisher: EventPublisher = Depends(get_publisher),
    conflict_checker: ConflictChecker = Depends(get_conflict_checker),
) -> RescheduleService:
    return RescheduleService(db, clock, publisher, conflict_checker)


def get_cancellation_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    publisher: EventPublisher = Depends(get_publisher),
) -> CancellationService:
    return CancellationService(db, clock, publisher)


def get_schedule_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ScheduleService:
    return ScheduleService(db, clock)

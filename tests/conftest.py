# tests/conftest.py
"""
Pytest configuration for the booking engine.

Every test gets its own SQLite file database (file, not memory, so that
threads with independent sessions see the same data) seeded with one
approved salon in America/New_York:

- two providers, both offering a 30 minute haircut and a 60 minute color
- business hours and provider availability Monday and Tuesday 09:00-17:00
- a fixed clock on Friday 2026-10-16 08:00 local (12:00 UTC)
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Tuple

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from salonbook.api.dependencies.database import get_db
from salonbook.api.dependencies.services import get_clock, get_publisher
from salonbook.core.clock import FixedClock
from salonbook.core.enums import BusinessStatus, RoleName
from salonbook.core.permissions import Actor
from salonbook.database import Base, build_engine
from salonbook.events import EventPublisher
from salonbook.main import app
from salonbook.models import (
    AvailabilityWindow,
    Business,
    BusinessHours,
    PaymentRecord,
    Provider,
    Service,
)
from salonbook.services.cancellation_service import CancellationService
from salonbook.services.reschedule_service import RescheduleService
from salonbook.services.reservation_service import ReservationService
from salonbook.services.schedule_service import ScheduleService
from salonbook.services.slot_service import SlotService
from tests.helpers import (
    CUSTOMER_ID,
    MONDAY,
    NOW,
    OWNER_ID,
    ZONE,
    Salon,
    actor_headers,
    local,
)


@pytest.fixture
def engine(tmp_path):
    test_engine = build_engine(f"sqlite:///{tmp_path / 'salonbook_test.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def events() -> List[Tuple[str, Dict[str, Any]]]:
    return []


@pytest.fixture
def publisher(events) -> EventPublisher:
    return EventPublisher([lambda event_type, payload: events.append((event_type, payload))])


def _weekday_rows(model, owner_field: str, owner_id: str, days=(0, 1)) -> List[Any]:
    return [
        model(**{owner_field: owner_id}, weekday=day, start_time=time(9), end_time=time(17))
        for day in days
    ]


@pytest.fixture
def salon(db) -> Salon:
    business = Business(
        owner_id=OWNER_ID, name="Studio Nord", timezone=ZONE, status=BusinessStatus.APPROVED.value
    )
    db.add(business)
    db.flush()

    haircut = Service(
        business_id=business.id, name="Haircut", price=Decimal("40.00"), duration_minutes=30
    )
    color = Service(
        business_id=business.id, name="Color", price=Decimal("90.00"), duration_minutes=60
    )
    first = Provider(business_id=business.id, user_id="stylist-1", display_name="Ana")
    second = Provider(business_id=business.id, user_id="stylist-2", display_name="Ben")
    first.services = [haircut, color]
    second.services = [haircut, color]
    db.add_all([haircut, color, first, second])
    db.flush()

    db.add_all(_weekday_rows(BusinessHours, "business_id", business.id))
    db.add_all(_weekday_rows(AvailabilityWindow, "provider_id", first.id))
    db.add_all(_weekday_rows(AvailabilityWindow, "provider_id", second.id))
    db.commit()

    return Salon(
        business_id=business.id,
        provider_id=first.id,
        provider_user_id=first.user_id,
        second_provider_id=second.id,
        second_provider_user_id=second.user_id,
        haircut_id=haircut.id,
        color_id=color.id,
    )


@pytest.fixture
def customer() -> Actor:
    return Actor(id=CUSTOMER_ID, role=RoleName.CUSTOMER)


@pytest.fixture
def owner() -> Actor:
    return Actor(id=OWNER_ID, role=RoleName.OWNER)


@pytest.fixture
def reservation_service(db, clock, publisher) -> ReservationService:
    return ReservationService(db, clock, publisher)


@pytest.fixture
def reschedule_service(db, clock, publisher) -> RescheduleService:
    return RescheduleService(db, clock, publisher)


@pytest.fixture
def cancellation_service(db, clock, publisher) -> CancellationService:
    return CancellationService(db, clock, publisher)


@pytest.fixture
def slot_service(db, clock) -> SlotService:
    return SlotService(db, clock)


@pytest.fixture
def schedule_service(db, clock) -> ScheduleService:
    return ScheduleService(db, clock)


@pytest.fixture
def book(reservation_service, salon) -> Callable[..., Any]:
    """Create a haircut booking for the test customer at a local wall-clock time."""

    def _book(day: date = MONDAY, hour: int = 10, minute: int = 0, **kwargs: Any):
        params = {
            "business_id": salon.business_id,
            "provider_ids": [salon.provider_id],
            "service_ids": [salon.haircut_id],
            "requested_start": local(day, hour, minute),
            "customer_id": CUSTOMER_ID,
        }
        params.update(kwargs)
        return reservation_service.create_booking(**params)

    return _book


@pytest.fixture
def add_payment(db) -> Callable[..., PaymentRecord]:
    def _add(booking_id: str, amount: str = "40.00", status: str = "SUCCEEDED") -> PaymentRecord:
        payment = PaymentRecord(booking_id=booking_id, amount=Decimal(amount), status=status)
        db.add(payment)
        db.commit()
        return payment

    return _add


@pytest.fixture
def client(db, clock, publisher):
    """Test client sharing the test session, clock and publisher."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_publisher] = lambda: publisher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def customer_headers() -> Dict[str, str]:
    return actor_headers(CUSTOMER_ID, "customer")


@pytest.fixture
def owner_headers() -> Dict[str, str]:
    return actor_headers(OWNER_ID, "owner")

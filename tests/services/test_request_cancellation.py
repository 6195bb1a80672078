# tests/services/test_request_cancellation.py
"""
A request cancelled while its service call runs on a worker thread must
leave nothing behind: the worker rolls back instead of committing.
"""

import asyncio
from datetime import datetime
import threading
import time

import pytest

from salonbook.core.clock import FixedClock
from salonbook.core.exceptions import OperationCancelledException
from salonbook.models import Booking, Business
from salonbook.routes.v1.bookings import run_service_call
from salonbook.services.reservation_service import ReservationService
from salonbook.services.schedule_service import ScheduleService
from tests.helpers import CUSTOMER_ID, MONDAY, NOW, ZONE, local


class SlowClock(FixedClock):
    """Signals the first read of "now", then stalls so a cancellation can land."""

    def __init__(self, instant: datetime, delay: float) -> None:
        super().__init__(instant)
        self.delay = delay
        self.entered = threading.Event()

    def now(self) -> datetime:
        self.entered.set()
        time.sleep(self.delay)
        return super().now()


class TestCancelledTransaction:
    def test_set_flag_rolls_back_instead_of_committing(self, db, salon, clock):
        service = ScheduleService(db, clock)
        cancelled = threading.Event()
        cancelled.set()
        service.bind_cancellation(cancelled)

        with pytest.raises(OperationCancelledException):
            with service.transaction():
                db.add(Business(owner_id="owner-2", name="Other", timezone=ZONE))

        assert db.query(Business).count() == 1

    def test_unset_flag_commits(self, db, salon, clock):
        service = ScheduleService(db, clock)
        service.bind_cancellation(threading.Event())

        with service.transaction():
            db.add(Business(owner_id="owner-2", name="Other", timezone=ZONE))

        assert db.query(Business).count() == 2


class TestCancelledRequest:
    def test_cancelled_booking_request_persists_nothing(self, db, salon, publisher, events):
        clock = SlowClock(NOW, delay=0.3)
        service = ReservationService(db, clock, publisher)

        async def cancel_midway() -> None:
            call = asyncio.ensure_future(
                run_service_call(
                    service,
                    service.create_booking,
                    salon.business_id,
                    [salon.provider_id],
                    [salon.haircut_id],
                    local(MONDAY, 10),
                    CUSTOMER_ID,
                )
            )
            await asyncio.to_thread(clock.entered.wait, 5)
            call.cancel()
            with pytest.raises(asyncio.CancelledError):
                await call

        asyncio.run(cancel_midway())

        assert db.query(Booking).count() == 0
        assert events == []

    def test_completed_call_returns_result(self, db, salon, clock, publisher):
        service = ReservationService(db, clock, publisher)

        booking = asyncio.run(
            run_service_call(
                service,
                service.create_booking,
                salon.business_id,
                [salon.provider_id],
                [salon.haircut_id],
                local(MONDAY, 10),
                CUSTOMER_ID,
            )
        )

        assert db.query(Booking).filter(Booking.id == booking.id).count() == 1

# tests/services/test_reschedule_service.py
"""Atomic cancel-and-replace rescheduling."""

from datetime import datetime, timedelta

import pytest

from salonbook.core.enums import BookingStatus, PaymentStatus, RoleName
from salonbook.core.exceptions import (
    BookingConflictException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    OutsideAvailabilityException,
    SameDayLockException,
    ValidationException,
)
from salonbook.core.permissions import Actor
from salonbook.models import Booking, BookingLineItem, PaymentRecord
from tests.helpers import CUSTOMER_ID, MONDAY, TUESDAY, local


def _status(db, booking_id):
    return db.query(Booking).filter(Booking.id == booking_id).one().status


class TestRescheduleBooking:
    def test_replaces_booking_and_moves_payments(
        self, db, book, reschedule_service, add_payment, events, salon
    ):
        original = book(hour=10, service_ids=[salon.haircut_id, salon.color_id])
        payment = add_payment(original.id)

        result = reschedule_service.reschedule_booking(
            original.id, CUSTOMER_ID, local(TUESDAY, 14)
        )

        assert result["old_booking_id"] == original.id
        replacement = db.query(Booking).filter(Booking.id == result["new_booking_id"]).one()
        assert _status(db, original.id) == BookingStatus.CANCELED.value
        assert replacement.status == BookingStatus.SCHEDULED.value
        assert replacement.rescheduled_from_id == original.id
        assert replacement.scheduled_start == local(TUESDAY, 14)
        assert replacement.scheduled_end == local(TUESDAY, 15, 30)
        assert [(i.provider_id, i.service_id) for i in replacement.line_items] == [
            (salon.provider_id, salon.haircut_id),
            (salon.provider_id, salon.color_id),
        ]
        moved = db.query(PaymentRecord).filter(PaymentRecord.id == payment.id).one()
        assert moved.booking_id == replacement.id
        assert moved.status == PaymentStatus.SUCCEEDED.value
        assert events[-1][0] == "BookingRescheduled"

    def test_may_overlap_its_own_original_interval(self, db, book, reschedule_service):
        original = book(hour=10)
        result = reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(MONDAY, 10, 15))
        assert _status(db, result["new_booking_id"]) == BookingStatus.SCHEDULED.value

    def test_conflict_leaves_original_untouched(self, db, book, reschedule_service, add_payment):
        original = book(hour=10)
        add_payment(original.id)
        book(day=TUESDAY, hour=10, customer_id="customer-2")

        with pytest.raises(BookingConflictException):
            reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(TUESDAY, 10))

        assert _status(db, original.id) == BookingStatus.SCHEDULED.value
        assert db.query(Booking).count() == 2
        assert db.query(BookingLineItem).count() == 2
        assert db.query(PaymentRecord).one().booking_id == original.id

    def test_outside_availability_leaves_original_untouched(self, db, book, reschedule_service):
        original = book(hour=10)
        with pytest.raises(OutsideAvailabilityException):
            reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(TUESDAY, 16, 45))
        assert _status(db, original.id) == BookingStatus.SCHEDULED.value
        assert db.query(Booking).count() == 1

    def test_same_day_is_locked(self, db, book, reschedule_service, clock):
        original = book(hour=15)
        clock.set(local(MONDAY, 8))
        with pytest.raises(SameDayLockException) as exc_info:
            reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(TUESDAY, 10))
        assert exc_info.value.status_code == 422
        assert _status(db, original.id) == BookingStatus.SCHEDULED.value

    def test_previous_local_evening_is_allowed(self, db, book, reschedule_service, clock):
        # Sunday 23:30 in New York is already Monday in UTC
        original = book(hour=10)
        clock.set(local(MONDAY - timedelta(days=1), 23, 30))
        result = reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(TUESDAY, 10))
        assert _status(db, result["new_booking_id"]) == BookingStatus.SCHEDULED.value

    def test_only_the_owning_customer(self, book, reschedule_service):
        original = book(hour=10)
        with pytest.raises(NotFoundException):
            reschedule_service.reschedule_booking(original.id, "customer-2", local(TUESDAY, 10))

    def test_actor_must_match_customer(self, book, reschedule_service):
        original = book(hour=10)
        with pytest.raises(ForbiddenException):
            reschedule_service.reschedule_booking(
                original.id,
                CUSTOMER_ID,
                local(TUESDAY, 10),
                actor=Actor("customer-2", RoleName.CUSTOMER),
            )

    def test_owner_role_cannot_reschedule(self, book, reschedule_service, owner):
        original = book(hour=10)
        with pytest.raises(ForbiddenException):
            reschedule_service.reschedule_booking(
                original.id, CUSTOMER_ID, local(TUESDAY, 10), actor=owner
            )

    def test_canceled_booking_cannot_be_rescheduled(self, db, book, reschedule_service):
        original = book(hour=10)
        first = reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(TUESDAY, 10))
        with pytest.raises(ConflictException) as exc_info:
            reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, local(TUESDAY, 11))
        assert exc_info.value.code == "BOOKING_NOT_SCHEDULED"
        assert _status(db, first["new_booking_id"]) == BookingStatus.SCHEDULED.value

    def test_naive_new_start_is_rejected(self, book, reschedule_service):
        original = book(hour=10)
        with pytest.raises(ValidationException):
            reschedule_service.reschedule_booking(original.id, CUSTOMER_ID, datetime(2026, 10, 20, 10))

    def test_new_start_in_the_past_is_rejected(self, book, reschedule_service):
        original = book(hour=10)
        with pytest.raises(ValidationException):
            reschedule_service.reschedule_booking(
                original.id, CUSTOMER_ID, local(MONDAY - timedelta(days=7), 10)
            )

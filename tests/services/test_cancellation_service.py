# tests/services/test_cancellation_service.py
"""Cancellation policy, scopes and refunds."""

from datetime import timedelta

import pytest

from salonbook.core.enums import BookingStatus, PaymentStatus, RoleName
from salonbook.core.exceptions import (
    ConflictException,
    NotFoundException,
    SameDayLockException,
    ValidationException,
)
from salonbook.models import Booking, PaymentRecord
from tests.helpers import CUSTOMER_ID, MONDAY, NOW, OWNER_ID, local


class TestCancelBooking:
    def test_cancels_and_refunds(self, db, book, cancellation_service, add_payment, events):
        booking = book(hour=10)
        add_payment(booking.id, status="SUCCEEDED")
        add_payment(booking.id, amount="5.00", status="PENDING")

        result = cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "customer")

        assert result == {
            "booking_id": booking.id,
            "previous_status": BookingStatus.SCHEDULED.value,
            "new_status": BookingStatus.CANCELED.value,
            "canceled_at": NOW,
        }
        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.status == BookingStatus.CANCELED.value
        assert stored.canceled_by_id == CUSTOMER_ID
        assert {p.status for p in db.query(PaymentRecord).all()} == {PaymentStatus.REFUNDED.value}
        assert events[-1][0] == "BookingCancelled"
        assert events[-1][1]["refunded_payments"] == 2

    def test_second_cancel_is_a_conflict(self, book, cancellation_service):
        booking = book(hour=10)
        cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, RoleName.CUSTOMER)
        with pytest.raises(ConflictException):
            cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, RoleName.CUSTOMER)

    def test_pending_booking_cannot_be_canceled(self, book, cancellation_service):
        booking = book(hour=10, hold_for_payment=True)
        with pytest.raises(ConflictException):
            cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "customer")

    @pytest.mark.parametrize("hour, minute", [(0, 30), (9, 0), (23, 0)])
    def test_same_local_day_is_locked(self, db, book, cancellation_service, clock, hour, minute):
        booking = book(hour=16)
        clock.set(local(MONDAY, hour, minute))
        with pytest.raises(SameDayLockException):
            cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "customer")
        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.status == BookingStatus.SCHEDULED.value

    def test_after_appointment_day_is_locked(self, book, cancellation_service, clock):
        booking = book(hour=10)
        clock.set(local(MONDAY + timedelta(days=3), 9))
        with pytest.raises(SameDayLockException):
            cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "customer")

    def test_day_before_is_allowed(self, book, cancellation_service, clock):
        booking = book(hour=10)
        clock.set(local(MONDAY - timedelta(days=1), 23, 59))
        result = cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "customer")
        assert result["new_status"] == BookingStatus.CANCELED.value

    def test_other_customer_gets_not_found(self, book, cancellation_service):
        booking = book(hour=10)
        with pytest.raises(NotFoundException):
            cancellation_service.cancel_booking(booking.id, "customer-2", "customer")

    def test_performing_provider_may_cancel(self, book, cancellation_service, salon):
        booking = book(hour=10)
        result = cancellation_service.cancel_booking(booking.id, salon.provider_user_id, "provider")
        assert result["new_status"] == BookingStatus.CANCELED.value

    def test_uninvolved_provider_gets_not_found(self, book, cancellation_service, salon):
        booking = book(hour=10)
        with pytest.raises(NotFoundException):
            cancellation_service.cancel_booking(
                booking.id, salon.second_provider_user_id, "provider"
            )

    def test_business_owner_may_cancel(self, book, cancellation_service):
        booking = book(hour=10)
        result = cancellation_service.cancel_booking(booking.id, OWNER_ID, "owner")
        assert result["previous_status"] == BookingStatus.SCHEDULED.value

    def test_other_owner_gets_not_found(self, book, cancellation_service):
        booking = book(hour=10)
        with pytest.raises(NotFoundException):
            cancellation_service.cancel_booking(booking.id, "owner-2", "owner")

    def test_unknown_role_is_rejected(self, book, cancellation_service):
        booking = book(hour=10)
        with pytest.raises(ValidationException):
            cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "receptionist")

    def test_canceled_time_is_bookable_again(self, book, cancellation_service):
        booking = book(hour=10)
        cancellation_service.cancel_booking(booking.id, CUSTOMER_ID, "customer")
        replacement = book(hour=10, customer_id="customer-2")
        assert replacement.status == BookingStatus.SCHEDULED.value

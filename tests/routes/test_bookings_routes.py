# tests/routes/test_bookings_routes.py
"""HTTP surface of the booking operations."""

from salonbook.core.enums import BookingStatus
from salonbook.core.timezone_service import TimezoneService
from salonbook.models import Booking
from tests.helpers import MISSING_ID, MONDAY, TUESDAY, actor_headers, local


def _payload(salon, start="2026-10-19T10:00:00-04:00", **overrides):
    payload = {
        "business_id": salon.business_id,
        "provider_ids": [salon.provider_id],
        "service_ids": [salon.haircut_id],
        "start": start,
    }
    payload.update(overrides)
    return payload


class TestCreateBookingRoute:
    def test_creates_booking(self, client, salon, customer_headers):
        response = client.post("/api/v1/bookings", json=_payload(salon), headers=customer_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == BookingStatus.SCHEDULED.value
        assert body["customer_id"] == salon.customer_id
        assert TimezoneService.parse_instant(body["scheduled_start"]) == local(MONDAY, 10)
        assert TimezoneService.parse_instant(body["scheduled_end"]) == local(MONDAY, 10, 30)
        assert len(body["line_items"]) == 1

    def test_start_without_offset_is_a_bad_request(self, client, salon, customer_headers, db):
        response = client.post(
            "/api/v1/bookings",
            json=_payload(salon, start="2026-10-19T10:00:00"),
            headers=customer_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        assert db.query(Booking).count() == 0

    def test_epoch_number_start_is_a_bad_request(self, client, salon, customer_headers, db):
        epoch = int(local(MONDAY, 10).timestamp())
        response = client.post(
            "/api/v1/bookings", json=_payload(salon, start=epoch), headers=customer_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        assert db.query(Booking).count() == 0

    def test_unknown_fields_are_rejected(self, client, salon, customer_headers):
        response = client.post(
            "/api/v1/bookings",
            json=_payload(salon, price_override="0.00"),
            headers=customer_headers,
        )
        assert response.status_code == 400

    def test_missing_actor_is_unauthorized(self, client, salon):
        response = client.post("/api/v1/bookings", json=_payload(salon))
        assert response.status_code == 401

    def test_unknown_role_is_unauthorized(self, client, salon):
        response = client.post(
            "/api/v1/bookings",
            json=_payload(salon),
            headers=actor_headers("customer-1", "receptionist"),
        )
        assert response.status_code == 401

    def test_provider_cannot_book(self, client, salon):
        response = client.post(
            "/api/v1/bookings",
            json=_payload(salon),
            headers=actor_headers(salon.provider_user_id, "provider"),
        )
        assert response.status_code == 403

    def test_overlap_is_a_conflict(self, client, salon, customer_headers):
        first = client.post("/api/v1/bookings", json=_payload(salon), headers=customer_headers)
        assert first.status_code == 201

        second = client.post(
            "/api/v1/bookings",
            json=_payload(salon, start="2026-10-19T14:15:00Z"),
            headers=actor_headers("customer-2", "customer"),
        )
        assert second.status_code == 409
        assert second.json()["code"] == "BOOKING_CONFLICT"

    def test_outside_availability_is_unprocessable(self, client, salon, customer_headers):
        response = client.post(
            "/api/v1/bookings",
            json=_payload(salon, start="2026-10-19T07:00:00-04:00"),
            headers=customer_headers,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "OUTSIDE_AVAILABILITY"


class TestRescheduleRoute:
    def test_reschedules(self, client, salon, customer_headers, book, db):
        booking = book(hour=10)
        response = client.post(
            f"/api/v1/bookings/{booking.id}/reschedule",
            json={"new_start": local(TUESDAY, 11).isoformat()},
            headers=customer_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["old_booking_id"] == booking.id
        replacement = db.query(Booking).filter(Booking.id == body["new_booking_id"]).one()
        assert replacement.scheduled_start == local(TUESDAY, 11)

    def test_same_day_is_unprocessable(self, client, salon, customer_headers, book, clock):
        booking = book(hour=15)
        clock.set(local(MONDAY, 9))
        response = client.post(
            f"/api/v1/bookings/{booking.id}/reschedule",
            json={"new_start": local(TUESDAY, 11).isoformat()},
            headers=customer_headers,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "SAME_DAY_LOCK"

    def test_naive_new_start_is_a_bad_request(self, client, customer_headers, book):
        booking = book(hour=10)
        response = client.post(
            f"/api/v1/bookings/{booking.id}/reschedule",
            json={"new_start": "2026-10-20T11:00:00"},
            headers=customer_headers,
        )
        assert response.status_code == 400

    def test_epoch_number_new_start_is_a_bad_request(self, client, customer_headers, book, db):
        booking = book(hour=10)
        response = client.post(
            f"/api/v1/bookings/{booking.id}/reschedule",
            json={"new_start": int(local(TUESDAY, 11).timestamp())},
            headers=customer_headers,
        )
        assert response.status_code == 400
        assert db.get(Booking, booking.id).status == BookingStatus.SCHEDULED.value


class TestCancelRoute:
    def test_customer_cancels(self, client, customer_headers, book):
        booking = book(hour=10)
        response = client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["previous_status"] == "SCHEDULED"
        assert body["new_status"] == "CANCELED"

    def test_second_cancel_conflicts(self, client, customer_headers, book):
        booking = book(hour=10)
        client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=customer_headers)
        response = client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=customer_headers)
        assert response.status_code == 409

    def test_other_customer_gets_not_found(self, client, book):
        booking = book(hour=10)
        response = client.post(
            f"/api/v1/bookings/{booking.id}/cancel",
            headers=actor_headers("customer-2", "customer"),
        )
        assert response.status_code == 404

    def test_unknown_booking(self, client, customer_headers, salon):
        response = client.post(f"/api/v1/bookings/{MISSING_ID}/cancel", headers=customer_headers)
        assert response.status_code == 404

    def test_same_day_cancel_is_unprocessable(self, client, customer_headers, book, clock):
        booking = book(hour=16)
        clock.set(local(MONDAY, 0, 5))
        response = client.post(f"/api/v1/bookings/{booking.id}/cancel", headers=customer_headers)
        assert response.status_code == 422


class TestPendingRoutes:
    def test_admin_confirms_pending(self, client, book):
        booking = book(hour=10, hold_for_payment=True)
        response = client.post(
            f"/api/v1/bookings/{booking.id}/confirm", headers=actor_headers("admin-1", "admin")
        )
        assert response.status_code == 200
        assert response.json()["status"] == "SCHEDULED"

    def test_customer_aborts_pending(self, client, customer_headers, book, db):
        booking = book(hour=10, hold_for_payment=True)
        response = client.delete(f"/api/v1/bookings/{booking.id}/pending", headers=customer_headers)
        assert response.status_code == 204
        assert db.query(Booking).count() == 0


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

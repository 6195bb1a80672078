# tests/services/test_overlap_prevention.py
"""
Competing writers against one file database, each with its own session.

Exactly one of two simultaneous requests for the same provider time may
commit; the other must see the winner and fail with a conflict.
"""

from concurrent.futures import ThreadPoolExecutor
import threading
from typing import List

import pytest

from salonbook.core.exceptions import BookingConflictException
from salonbook.models import Booking
from salonbook.services.reservation_service import ReservationService
from tests.helpers import MONDAY, local

pytestmark = pytest.mark.concurrency


def _race(session_factory, clock, publisher, requests: List[dict]):
    barrier = threading.Barrier(len(requests))

    def attempt(params):
        session = session_factory()
        try:
            service = ReservationService(session, clock, publisher)
            barrier.wait(timeout=10)
            try:
                return service.create_booking(**params).id
            except BookingConflictException as exc:
                return exc
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=len(requests)) as pool:
        return list(pool.map(attempt, requests))


def test_simultaneous_requests_for_same_slot(session_factory, clock, publisher, salon, db):
    params = {
        "business_id": salon.business_id,
        "provider_ids": [salon.provider_id],
        "service_ids": [salon.haircut_id],
        "requested_start": local(MONDAY, 10),
    }
    results = _race(
        session_factory,
        clock,
        publisher,
        [dict(params, customer_id="customer-a"), dict(params, customer_id="customer-b")],
    )

    winners = [r for r in results if isinstance(r, str)]
    losers = [r for r in results if isinstance(r, BookingConflictException)]
    assert len(winners) == 1
    assert len(losers) == 1
    assert db.query(Booking).count() == 1


def test_overlapping_provider_sets_serialize(session_factory, clock, publisher, salon, db):
    combined = {
        "business_id": salon.business_id,
        "provider_ids": [salon.provider_id, salon.second_provider_id],
        "service_ids": [salon.haircut_id, salon.color_id],
        "requested_start": local(MONDAY, 10),
        "customer_id": "customer-a",
    }
    single = {
        "business_id": salon.business_id,
        "provider_ids": [salon.second_provider_id],
        "service_ids": [salon.color_id],
        "requested_start": local(MONDAY, 11),
        "customer_id": "customer-b",
    }
    results = _race(session_factory, clock, publisher, [combined, single])

    assert sum(isinstance(r, str) for r in results) == 1
    assert db.query(Booking).count() == 1


def test_disjoint_requests_both_succeed(session_factory, clock, publisher, salon, db):
    base = {
        "business_id": salon.business_id,
        "service_ids": [salon.haircut_id],
        "requested_start": local(MONDAY, 10),
    }
    results = _race(
        session_factory,
        clock,
        publisher,
        [
            dict(base, provider_ids=[salon.provider_id], customer_id="customer-a"),
            dict(base, provider_ids=[salon.second_provider_id], customer_id="customer-b"),
        ],
    )

    assert all(isinstance(r, str) for r in results)
    assert db.query(Booking).count() == 2

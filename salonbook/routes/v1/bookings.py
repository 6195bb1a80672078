# salonbook/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to the booking services.

Endpoints:
    POST / - Create a booking for the acting customer
    POST /{booking_id}/reschedule - Move a booking to a new start
    POST /{booking_id}/cancel - Cancel a booking and refund its payments
    POST /{booking_id}/confirm - Confirm a booking held for payment
    DELETE /{booking_id}/pending - Abort a booking held for payment
"""

import asyncio
import logging
import threading
from typing import Any, Callable, NoReturn, TypeVar

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from fastapi.params import Path

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import (
    get_cancellation_service,
    get_reschedule_service,
    get_reservation_service,
)
from ...core.exceptions import DomainException
from ...core.permissions import Actor
from ...schemas.booking import (
    BookingCreate,
    BookingRescheduleRequest,
    BookingResponse,
    CancelResponse,
    RescheduleResponse,
)
from ...services.base import BaseService
from ...services.cancellation_service import CancellationService
from ...services.reschedule_service import RescheduleService
from ...services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


async def run_service_call(service: BaseService, func: Callable[..., T], *args: Any) -> T:
    """
    Run a sync service call on a worker thread.

    A cancelled request (client disconnect, timeout) cannot stop the thread,
    so the service is flagged instead: its open transaction rolls back rather
    than committing. The worker is awaited before the cancellation propagates,
    which keeps the request's session from being closed underneath it.
    """
    cancelled = threading.Event()
    service.bind_cancellation(cancelled)
    worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(worker)
    except asyncio.CancelledError:
        cancelled.set()
        logger.warning(f"Request cancelled during {getattr(func, '__name__', func)}")
        await asyncio.gather(worker, return_exceptions=True)
        raise


def _booking_id_path() -> Any:
    return Path(
        ...,
        description="Booking ULID",
        pattern=ULID_PATH_PATTERN,
        examples=["01HF4G12ABCDEF3456789XYZAB"],
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Time conflict"}},
)
async def create_booking(
    payload: BookingCreate = Body(...),
    actor: Actor = Depends(get_current_actor),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> BookingResponse:
    """Create a booking; the acting customer is the booking's customer."""
    try:
        booking = await run_service_call(
            reservation_service,
            reservation_service.create_booking,
            payload.business_id,
            payload.provider_ids,
            payload.service_ids,
            payload.start,
            actor.id,
            payload.notes,
            actor,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/reschedule",
    response_model=RescheduleResponse,
    responses={404: {"description": "Booking not found"}, 409: {"description": "Time conflict"}},
)
async def reschedule_booking(
    booking_id: str = _booking_id_path(),
    payload: BookingRescheduleRequest = Body(...),
    actor: Actor = Depends(get_current_actor),
    reschedule_service: RescheduleService = Depends(get_reschedule_service),
) -> RescheduleResponse:
    """
    Reschedule flow (server-orchestrated):
    - Validates ownership of the original booking and the change window
    - Cancels the original and creates the replacement atomically
    - Returns both ids
    """
    try:
        result = await run_service_call(
            reschedule_service,
            reschedule_service.reschedule_booking,
            booking_id,
            actor.id,
            payload.new_start,
            actor,
        )
        return RescheduleResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_id}/cancel",
    response_model=CancelResponse,
    responses={404: {"description": "Booking not found"}},
)
async def cancel_booking(
    booking_id: str = _booking_id_path(),
    actor: Actor = Depends(get_current_actor),
    cancellation_service: CancellationService = Depends(get_cancellation_service),
) -> CancelResponse:
    try:
        result = await run_service_call(
            cancellation_service,
            cancellation_service.cancel_booking,
            booking_id,
            actor.id,
            actor.role,
        )
        return CancelResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: str = _booking_id_path(),
    actor: Actor = Depends(get_current_actor),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> BookingResponse:
    """Confirm a PENDING booking once payment has been captured (admin only)."""
    try:
        booking = await run_service_call(
            reservation_service,
            reservation_service.confirm_booking,
            booking_id,
            actor,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}/pending", status_code=status.HTTP_204_NO_CONTENT)
async def abort_pending_booking(
    booking_id: str = _booking_id_path(),
    actor: Actor = Depends(get_current_actor),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> Response:
    try:
        await run_service_call(
            reservation_service,
            reservation_service.abort_pending_booking,
            booking_id,
            actor.id,
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)

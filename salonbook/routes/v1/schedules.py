# salonbook/routes/v1/schedules.py
"""
Schedule administration routes - API v1

Endpoints:
    GET/PUT /businesses/{business_id}/hours - Weekly operating hours
    GET/PUT /providers/{provider_id}/availability - Weekly availability
    GET/POST /providers/{provider_id}/unavailability - Recurring blocks
    DELETE /providers/{provider_id}/unavailability/{block_id} - Remove a block
"""

import logging
from typing import List

from fastapi import APIRouter, Body, Depends, Response, status

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_schedule_service
from ...core.exceptions import DomainException
from ...core.permissions import Actor
from ...schemas.schedule import (
    AvailabilityUpdate,
    BusinessHoursUpdate,
    WeeklyWindowIn,
    WeeklyWindowResponse,
)
from ...services.schedule_service import ScheduleService
from .bookings import handle_domain_exception, run_service_call

logger = logging.getLogger(__name__)

router = APIRouter(tags=["schedules-v1"])


def _to_response(rows: List) -> List[WeeklyWindowResponse]:
    return [
        WeeklyWindowResponse(
            id=row.id,
            weekday=row.weekday,
            start_time=row.start_time,
            end_time=row.end_time,
            slot_interval_minutes=getattr(row, "slot_interval_minutes", None),
        )
        for row in rows
    ]


@router.get("/businesses/{business_id}/hours", response_model=List[WeeklyWindowResponse])
async def get_business_hours(
    business_id: str,
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> List[WeeklyWindowResponse]:
    try:
        rows = await run_service_call(
            schedule_service,
            schedule_service.get_business_hours,
            business_id,
        )
        return _to_response(rows)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/businesses/{business_id}/hours", response_model=List[WeeklyWindowResponse])
async def set_business_hours(
    business_id: str,
    payload: BusinessHoursUpdate = Body(...),
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> List[WeeklyWindowResponse]:
    """Replace the weekly hours; owner of the business or admin only."""
    try:
        rows = await run_service_call(
            schedule_service,
            schedule_service.set_business_hours,
            business_id,
            actor,
            [window.to_window() for window in payload.windows],
        )
        return _to_response(rows)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/providers/{provider_id}/availability", response_model=List[WeeklyWindowResponse])
async def get_provider_availability(
    provider_id: str,
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> List[WeeklyWindowResponse]:
    try:
        rows = await run_service_call(
            schedule_service,
            schedule_service.get_provider_availability,
            provider_id,
        )
        return _to_response(rows)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/providers/{provider_id}/availability", response_model=List[WeeklyWindowResponse])
async def set_provider_availability(
    provider_id: str,
    payload: AvailabilityUpdate = Body(...),
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> List[WeeklyWindowResponse]:
    try:
        rows = await run_service_call(
            schedule_service,
            schedule_service.set_provider_availability,
            provider_id,
            actor,
            [window.to_window() for window in payload.windows],
            payload.slot_interval_minutes,
        )
        return _to_response(rows)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/providers/{provider_id}/unavailability", response_model=List[WeeklyWindowResponse])
async def list_unavailability(
    provider_id: str,
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> List[WeeklyWindowResponse]:
    try:
        rows = await run_service_call(
            schedule_service,
            schedule_service.list_unavailability,
            provider_id,
        )
        return _to_response(rows)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/providers/{provider_id}/unavailability",
    response_model=WeeklyWindowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_unavailability(
    provider_id: str,
    payload: WeeklyWindowIn = Body(...),
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> WeeklyWindowResponse:
    try:
        block = await run_service_call(
            schedule_service,
            schedule_service.add_unavailability,
            provider_id,
            actor,
            payload.to_window(),
        )
        return _to_response([block])[0]
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/providers/{provider_id}/unavailability/{block_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_unavailability(
    provider_id: str,
    block_id: str,
    actor: Actor = Depends(get_current_actor),
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> Response:
    try:
        await run_service_call(
            schedule_service,
            schedule_service.remove_unavailability,
            provider_id,
            block_id,
            actor,
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)

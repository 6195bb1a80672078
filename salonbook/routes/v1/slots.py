# salonbook/routes/v1/slots.py
"""
Slot routes - API v1

    GET /businesses/{business_id}/providers/{provider_id}/slots
"""

from datetime import date, datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import get_current_actor
from ...api.dependencies.services import get_slot_service
from ...core.config import settings
from ...core.exceptions import DomainException
from ...core.permissions import Actor
from ...schemas.schedule import SlotsResponse
from ...services.slot_service import SlotService
from .bookings import handle_domain_exception, run_service_call

logger = logging.getLogger(__name__)

router = APIRouter(tags=["slots-v1"])


def _collect_slots(
    slot_service: SlotService,
    business_id: str,
    provider_id: str,
    duration_minutes: int,
    start_date: Optional[date],
    days: Optional[int],
    actor: Actor,
) -> List[datetime]:
    # The iterator reads from the session, so it is drained on the worker thread
    return list(
        slot_service.list_available_slots(
            business_id, provider_id, duration_minutes, start_date, days, actor
        )
    )


@router.get("/businesses/{business_id}/providers/{provider_id}/slots", response_model=SlotsResponse)
async def list_available_slots(
    business_id: str,
    provider_id: str,
    duration_minutes: int = Query(..., description="Length of the appointment in minutes"),
    start_date: Optional[date] = Query(None, description="First business-local date (default: today)"),
    days: Optional[int] = Query(None, description="Number of local days to cover"),
    actor: Actor = Depends(get_current_actor),
    slot_service: SlotService = Depends(get_slot_service),
) -> SlotsResponse:
    """Candidate start instants, ascending, in UTC."""
    try:
        slots = await run_service_call(
            slot_service,
            _collect_slots,
            slot_service,
            business_id,
            provider_id,
            duration_minutes,
            start_date,
            days,
            actor,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SlotsResponse(
        business_id=business_id,
        provider_id=provider_id,
        duration_minutes=duration_minutes,
        start_date=start_date,
        days=settings.default_slot_range_days if days is None else days,
        slots=slots,
    )

# salonbook/services/booking_policy.py
"""Change-window rules shared by rescheduling and cancellation."""

from datetime import datetime

from ..core.exceptions import SameDayLockException
from ..core.timezone_service import TimezoneService
from ..models.booking import Booking


def enforce_same_day_lock(booking: Booking, zone: str, now: datetime, action: str) -> None:
    """
    Reject changes once the appointment's local calendar day has arrived.

    Both dates are taken in the business's zone, so the outcome does not
    depend on the offset the caller used to express any instant.
    """
    appointment_day = TimezoneService.local_date(booking.scheduled_start, zone)
    today = TimezoneService.local_today(now, zone)
    if appointment_day <= today:
        raise SameDayLockException(action, appointment_day.isoformat())

# salonbook/models/__init__.py
"""
Database models for the salon booking engine.

Importing this package registers every table on Base.metadata.
"""

from .availability import AvailabilityWindow, UnavailabilityWindow
from .booking import Booking, BookingLineItem
from .business import Business, BusinessHours
from .payment import PaymentRecord
from .provider import Provider, Service, provider_services

__all__ = [
    "AvailabilityWindow",
    "Booking",
    "BookingLineItem",
    "Business",
    "BusinessHours",
    "PaymentRecord",
    "Provider",
    "Service",
    "UnavailabilityWindow",
    "provider_services",
]

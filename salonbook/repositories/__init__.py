# salonbook/repositories/__init__.py
"""Data access layer; services own every transaction boundary."""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .business_repository import BusinessRepository, ProviderRepository, ServiceRepository
from .factory import RepositoryFactory
from .payment_repository import PaymentRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "BusinessRepository",
    "IRepository",
    "PaymentRepository",
    "ProviderRepository",
    "RepositoryFactory",
    "ServiceRepository",
]

# salonbook/repositories/factory.py
"""
Repository Factory.

Provides centralized creation of repository instances, ensuring consistent
initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .business_repository import BusinessRepository, ProviderRepository, ServiceRepository
from .payment_repository import PaymentRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_business_repository(db: Session) -> BusinessRepository:
        return BusinessRepository(db)

    @staticmethod
    def create_provider_repository(db: Session) -> ProviderRepository:
        return ProviderRepository(db)

    @staticmethod
    def create_service_repository(db: Session) -> ServiceRepository:
        return ServiceRepository(db)

    @staticmethod
    def create_availability_repository(db: Session) -> AvailabilityRepository:
        return AvailabilityRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        return BookingRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> PaymentRepository:
        return PaymentRepository(db)

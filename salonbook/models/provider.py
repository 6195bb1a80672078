# salonbook/models/provider.py
"""
Provider and service catalogue models.

Providers are the staff members who perform services. Each belongs to
exactly one business and offers a subset of that business's services.
"""

from decimal import Decimal
import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


provider_services = Table(
    "provider_services",
    Base.metadata,
    Column("provider_id", String(26), ForeignKey("providers.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", String(26), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class Provider(Base):
    """A staff member with independent recurring availability."""

    __tablename__ = "providers"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    business_id = Column(String(26), ForeignKey("businesses.id"), nullable=False, index=True)
    # Identity of the staff member as known to the auth collaborator
    user_id = Column(String(64), nullable=False, unique=True)
    display_name = Column(String(120), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    business = relationship("Business", back_populates="providers")
    services = relationship("Service", secondary=provider_services, back_populates="providers")
    availability = relationship(
        "AvailabilityWindow", back_populates="provider", cascade="all, delete-orphan"
    )
    unavailability = relationship(
        "UnavailabilityWindow", back_populates="provider", cascade="all, delete-orphan"
    )

    def offers(self, service_id: str) -> bool:
        return any(service.id == service_id for service in self.services)

    def __repr__(self) -> str:
        return f"<Provider {self.id}: business={self.business_id} active={self.active}>"


class Service(Base):
    """A bookable service with its list price and duration."""

    __tablename__ = "services"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    business_id = Column(String(26), ForeignKey("businesses.id"), nullable=False, index=True)
    name = Column(String(160), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    duration_minutes = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    business = relationship("Business", back_populates="services")
    providers = relationship("Provider", secondary=provider_services, back_populates="services")

    __table_args__ = (
        CheckConstraint("duration_minutes >= 0", name="ck_services_duration"),
        CheckConstraint("price >= 0", name="ck_services_price"),
    )

    def __repr__(self) -> str:
        return f"<Service {self.id}: {self.name} {self.duration_minutes}min>"

# salonbook/models/business.py
"""
Business (tenant) models.

A Business owns its providers, its service catalogue and its weekly
operating hours. Its IANA timezone is the zone every recurring schedule of
the tenant is resolved in.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import BusinessStatus
from ..database import Base
from ..domain.schedule import WeeklyWindow
from .types import UTCDateTime

logger = logging.getLogger(__name__)


class Business(Base):
    """A salon taking appointments through one or more providers."""

    __tablename__ = "businesses"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(160), nullable=False)
    timezone = Column(String(64), nullable=False, default="America/New_York")
    status = Column(String(20), nullable=False, default=BusinessStatus.PENDING.value, index=True)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    providers = relationship("Provider", back_populates="business")
    services = relationship("Service", back_populates="business")
    hours = relationship(
        "BusinessHours",
        back_populates="business",
        cascade="all, delete-orphan",
        order_by="BusinessHours.weekday",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED', 'SUSPENDED')",
            name="ck_businesses_status",
        ),
    )

    @property
    def is_bookable(self) -> bool:
        return self.status == BusinessStatus.APPROVED.value

    def __repr__(self) -> str:
        return f"<Business {self.id}: {self.name} ({self.timezone}, {self.status})>"


class BusinessHours(Base):
    """Recurring weekly operating hours; weekday 0 is Monday."""

    __tablename__ = "business_hours"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    business_id = Column(
        String(26), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    business = relationship("Business", back_populates="hours")

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_business_hours_weekday"),
        CheckConstraint("end_time > start_time", name="ck_business_hours_order"),
        Index("idx_business_hours_business_weekday", "business_id", "weekday"),
    )

    def to_window(self) -> WeeklyWindow:
        return WeeklyWindow(self.weekday, self.start_time, self.end_time)

    def __repr__(self) -> str:
        return f"<BusinessHours {self.business_id} weekday={self.weekday} {self.to_window().label()}>"

# salonbook/models/availability.py
"""
Recurring weekly availability models.

Both tables hold local wall-clock ranges without a calendar date. They are
turned into absolute intervals only through WeeklyWindow.resolve() for a
specific date in the business's timezone.

Classes:
    AvailabilityWindow: When a provider is open for bookings
    UnavailabilityWindow: Blocked sub-ranges (breaks) inside availability
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from ..domain.schedule import WeeklyWindow


class AvailabilityWindow(Base):
    """Recurring open hours of a provider; weekday 0 is Monday."""

    __tablename__ = "availability_windows"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    provider_id = Column(
        String(26), ForeignKey("providers.id", ondelete="CASCADE"), nullable=False
    )
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    # Granularity of the slot walk; None means the configured default
    slot_interval_minutes = Column(Integer, nullable=True)

    provider = relationship("Provider", back_populates="availability")

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_availability_weekday"),
        CheckConstraint("end_time > start_time", name="ck_availability_order"),
        CheckConstraint(
            "slot_interval_minutes IS NULL OR slot_interval_minutes > 0",
            name="ck_availability_slot_interval",
        ),
        Index("idx_availability_provider_weekday", "provider_id", "weekday", "start_time"),
    )

    def to_window(self) -> WeeklyWindow:
        return WeeklyWindow(self.weekday, self.start_time, self.end_time)

    def __repr__(self) -> str:
        return f"<AvailabilityWindow {self.provider_id} weekday={self.weekday} {self.to_window().label()}>"


class UnavailabilityWindow(Base):
    """Recurring blocked range inside a provider's availability."""

    __tablename__ = "unavailability_windows"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    provider_id = Column(
        String(26), ForeignKey("providers.id", ondelete="CASCADE"), nullable=False
    )
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    provider = relationship("Provider", back_populates="unavailability")

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_unavailability_weekday"),
        CheckConstraint("end_time > start_time", name="ck_unavailability_order"),
        Index("idx_unavailability_provider_weekday", "provider_id", "weekday", "start_time"),
    )

    def to_window(self) -> WeeklyWindow:
        return WeeklyWindow(self.weekday, self.start_time, self.end_time)

    def __repr__(self) -> str:
        return f"<UnavailabilityWindow {self.provider_id} weekday={self.weekday} {self.to_window().label()}>"

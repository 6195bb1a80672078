"""Schemas for slots and recurring schedules."""

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import Field, model_validator

from ..domain.schedule import WeeklyWindow
from ._strict_base import StrictModel, StrictRequestModel


class WeeklyWindowIn(StrictRequestModel):
    """A weekday (0 = Monday) and local wall-clock range."""

    weekday: int = Field(..., ge=0, le=6)
    start_time: time = Field(..., description="Local start (HH:MM)")
    end_time: time = Field(..., description="Local end (HH:MM)")

    @model_validator(mode="after")
    def _check_order(self) -> "WeeklyWindowIn":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def to_window(self) -> WeeklyWindow:
        return WeeklyWindow(self.weekday, self.start_time, self.end_time)


class BusinessHoursUpdate(StrictRequestModel):
    windows: List[WeeklyWindowIn] = Field(default_factory=list)


class AvailabilityUpdate(StrictRequestModel):
    windows: List[WeeklyWindowIn] = Field(default_factory=list)
    slot_interval_minutes: Optional[int] = Field(None, gt=0, le=240)


class WeeklyWindowResponse(StrictModel):
    id: str
    weekday: int
    start_time: time
    end_time: time
    slot_interval_minutes: Optional[int] = None


class SlotsResponse(StrictModel):
    business_id: str
    provider_id: str
    duration_minutes: int
    start_date: Optional[date] = None
    days: int
    slots: List[datetime]

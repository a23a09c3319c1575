"""
Pydantic schemas for weekly availability, date overrides and day views
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.availability import DayOfWeek

HOUR_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"  # HH:mm


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class WeeklyAvailabilityItem(BaseModel):
    """One open-hours window for a weekday"""
    day_of_week: DayOfWeek
    start_time: str = Field(..., pattern=HOUR_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=HOUR_PATTERN, examples=["17:00"])

    @model_validator(mode="after")
    def validate_window(self):
        # zero-padded HH:mm strings order lexicographically
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class WeeklyAvailabilityReplace(BaseModel):
    """Full replacement of an organization's weekly availability"""
    availabilities: List[WeeklyAvailabilityItem] = Field(default_factory=list)

    @field_validator("availabilities")
    @classmethod
    def validate_unique_days(cls, v):
        days = [item.day_of_week for item in v]
        if len(days) != len(set(days)):
            raise ValueError("Each day of the week can only appear once")
        return v


class WeeklyAvailabilityUpdate(BaseModel):
    """Partial update of a single weekly rule"""
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = Field(None, pattern=HOUR_PATTERN)
    end_time: Optional[str] = Field(None, pattern=HOUR_PATTERN)


class DateOverrideCreate(BaseModel):
    """Blackout date; accepts YYYY-MM-DD or a full ISO timestamp"""
    date: str = Field(..., min_length=1, examples=["2024-01-08"])
    reason: Optional[str] = Field(None, max_length=255)


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class DayStatus(BaseModel):
    """Whether an organization can be booked on a given date"""
    available: bool
    reason: Optional[str] = None

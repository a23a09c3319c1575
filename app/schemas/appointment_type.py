"""
Pydantic schemas for appointment types
"""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
CLEARABLE_COLOR_PATTERN = r"^(#[0-9A-Fa-f]{6})?$"


class AppointmentTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    duration_minutes: int = Field(..., ge=1, le=1440, description="Duration in minutes")
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    is_active: bool = True

    @field_validator("color", mode="before")
    @classmethod
    def blank_color_to_none(cls, v):
        """Empty string clears the color"""
        return v or None


class AppointmentTypeUpdate(BaseModel):
    """
    Schema for updating an appointment type.
    All fields are optional - only send what you want to update.
    An empty color string clears the color.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=1, le=1440)
    color: Optional[str] = Field(None, pattern=CLEARABLE_COLOR_PATTERN)
    is_active: Optional[bool] = None

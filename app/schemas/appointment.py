"""
Pydantic schemas for booking and appointment status changes
"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    """
    Slot selection submitted by a client.

    `date` (YYYY-MM-DD) and `hour` (HH:mm) are kept as text; the booking
    service parses them and reports malformed values as validation errors.
    """
    organization_id: Optional[UUID] = None
    appointment_type_id: Optional[UUID] = None
    date: Optional[str] = None
    hour: Optional[str] = None
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    contact_name: Optional[str] = Field(None, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None

    @field_validator("contact_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    cancellation_reason: Optional[str] = None


class ActorCapabilities(BaseModel):
    """What the current actor may do with one appointment"""
    can_confirm: bool = False
    can_cancel: bool = False
    can_complete: bool = False
    can_mark_no_show: bool = False

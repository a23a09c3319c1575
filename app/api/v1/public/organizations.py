"""
Public organization routes
Calendar and day views are readable without a token; a token only widens
which appointments the day view shows.
"""
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.config.database import get_db
from app.api.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.services.appointment_type.appointment_type_service import AppointmentTypeService
from app.services.availability.availability_service import AvailabilityService
from app.services.organization.organization_service import OrganizationService

router = APIRouter(prefix="/organizations", tags=["public-organizations"])


@router.get("/{organization_id}")
async def get_organization(
        organization_id: UUID = Path(..., description="The organization ID"),
        db: Session = Depends(get_db)
):
    """Organization profile with its weekly availability and blackout dates."""
    return OrganizationService.get_public_profile(db, organization_id)


@router.get("/{organization_id}/calendar")
async def get_calendar(
        organization_id: UUID,
        month: Optional[str] = Query(None, description="Month as YYYY-MM, defaults to the current month"),
        db: Session = Depends(get_db)
):
    """Per-day availability for the whole weeks spanning a month."""
    return AvailabilityService.get_calendar(db, organization_id, month)


@router.get("/{organization_id}/days/{day}")
async def get_day(
        organization_id: UUID,
        day: str = Path(..., description="Date as YYYY-MM-DD"),
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    """
    Hour-slots of one day with their occupants.
    Anonymous visitors get the slot grid only.
    """
    return AvailabilityService.get_day_view(db, organization_id, day, actor)


@router.get("/{organization_id}/appointment-types")
async def list_appointment_types(
        organization_id: UUID,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    types = AppointmentTypeService.list_types(db, organization_id, actor)
    return {"appointment_types": [t.to_dict() for t in types]}

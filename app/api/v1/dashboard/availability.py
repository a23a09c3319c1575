"""
Availability Management Dashboard Routes
Weekly open hours and blackout dates, editable by organization members
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID

from app.config.database import get_db
from app.api.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.availability import (
    DateOverrideCreate,
    WeeklyAvailabilityReplace,
    WeeklyAvailabilityUpdate,
)
from app.services.availability.availability_service import AvailabilityService

router = APIRouter(tags=["dashboard-availability"])


# ============================================================================
# Weekly availability
# ============================================================================

@router.put("/organizations/{organization_id}/availability")
async def replace_weekly_availability(
        organization_id: UUID,
        data: WeeklyAvailabilityReplace,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    """Replace the whole weekly schedule in one transaction."""
    rules = AvailabilityService.replace_weekly_availability(db, actor, organization_id, data)
    return {
        "success": True,
        "message": "Weekly availability updated successfully.",
        "availabilities": [rule.to_dict() for rule in rules],
    }


@router.patch("/availability/{rule_id}")
async def update_weekly_availability(
        rule_id: UUID,
        data: WeeklyAvailabilityUpdate,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    rule = AvailabilityService.update_rule(db, actor, rule_id, data)
    return {"success": True, "availability": rule.to_dict()}


@router.delete("/availability/{rule_id}")
async def delete_weekly_availability(
        rule_id: UUID,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    AvailabilityService.delete_rule(db, actor, rule_id)
    return {"success": True, "message": "Weekly availability deleted successfully."}


# ============================================================================
# Date overrides (unavailable dates)
# ============================================================================

@router.post("/organizations/{organization_id}/date-overrides", status_code=status.HTTP_201_CREATED)
async def create_date_override(
        organization_id: UUID,
        data: DateOverrideCreate,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    override = AvailabilityService.create_date_override(db, actor, organization_id, data)
    return {"success": True, "date_override": override.to_dict()}


@router.delete("/date-overrides/{override_id}")
async def delete_date_override(
        override_id: UUID,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    AvailabilityService.delete_date_override(db, actor, override_id)
    return {"success": True, "message": "Unavailable date removed successfully."}

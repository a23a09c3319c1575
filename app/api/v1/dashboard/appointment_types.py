"""
Appointment Type Dashboard Routes
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID

from app.config.database import get_db
from app.api.dependencies import get_current_actor
from app.schemas.actor import Actor
from app.schemas.appointment_type import AppointmentTypeCreate, AppointmentTypeUpdate
from app.services.appointment_type.appointment_type_service import AppointmentTypeService

router = APIRouter(tags=["dashboard-appointment-types"])


@router.post("/organizations/{organization_id}/appointment-types", status_code=status.HTTP_201_CREATED)
async def create_appointment_type(
        organization_id: UUID,
        data: AppointmentTypeCreate,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    appointment_type = AppointmentTypeService.create_type(db, actor, organization_id, data)
    return {"success": True, "appointment_type": appointment_type.to_dict()}


@router.patch("/appointment-types/{appointment_type_id}")
async def update_appointment_type(
        appointment_type_id: UUID,
        data: AppointmentTypeUpdate,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    appointment_type = AppointmentTypeService.update_type(db, actor, appointment_type_id, data)
    return {"success": True, "appointment_type": appointment_type.to_dict()}


@router.delete("/appointment-types/{appointment_type_id}")
async def delete_appointment_type(
        appointment_type_id: UUID,
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    AppointmentTypeService.delete_type(db, actor, appointment_type_id)
    return {"success": True, "message": "Appointment type deleted successfully."}

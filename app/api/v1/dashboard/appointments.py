# ============================================================================
# FILE: app/api/v1/dashboard/appointments.py
# Token authenticated endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from app.config.database import get_db
from app.api.dependencies import get_current_actor, get_notification_service
from app.schemas.actor import Actor
from app.schemas.appointment import AppointmentCreate, AppointmentStatusUpdate
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.booking_service import BookingService
from app.services.appointment.status_service import StatusTransitionService
from app.services.notification.notification_service import NotificationService

router = APIRouter(tags=["dashboard-appointments"])


@router.post("/appointments", status_code=status.HTTP_201_CREATED)
async def create_appointment(
        data: AppointmentCreate,
        actor: Actor = Depends(get_current_actor),
        notifier: NotificationService = Depends(get_notification_service),
        db: Session = Depends(get_db)
):
    """
    Book an hour-slot for the current user.
    The appointment starts out PENDING until the organization confirms it.
    """
    appointment = await BookingService.create_appointment(db, actor, data, notifier=notifier)
    return {
        "success": True,
        "message": "Appointment created successfully!",
        "appointment": AppointmentQueryService.serialize_appointment(appointment, actor=actor),
    }


@router.patch("/appointments/{appointment_id}/status")
async def update_appointment_status(
        data: AppointmentStatusUpdate,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        actor: Actor = Depends(get_current_actor),
        notifier: NotificationService = Depends(get_notification_service),
        db: Session = Depends(get_db)
):
    """Confirm, cancel, complete or mark an appointment as no-show."""
    appointment = await StatusTransitionService.update_status(
        db,
        appointment_id,
        data.status,
        actor,
        cancellation_reason=data.cancellation_reason,
        notifier=notifier,
    )
    return {
        "success": True,
        "message": f"Appointment {appointment.status.value.lower()} successfully!",
        "appointment": AppointmentQueryService.serialize_appointment(appointment, actor=actor),
    }


@router.get("/appointments/mine")
async def list_my_appointments(
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    return AppointmentQueryService.get_user_appointments(db, actor)


@router.get("/appointments/mine/next")
async def get_my_next_appointment(
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    """Nearest upcoming appointment that is not cancelled."""
    return {"appointment": AppointmentQueryService.get_nearest_appointment(db, actor)}


@router.get("/organizations/{organization_id}/appointments")
async def list_organization_appointments(
        organization_id: UUID,
        date: Optional[str] = Query(None, description="Filter to one day (YYYY-MM-DD)"),
        hour: Optional[str] = Query(None, description="Narrow the day to one hour (HH:mm)"),
        actor: Actor = Depends(get_current_actor),
        db: Session = Depends(get_db)
):
    """All appointments of an organization; owner or admin only."""
    return AppointmentQueryService.get_organization_appointments(
        db, organization_id, actor, day=date, hour=hour
    )

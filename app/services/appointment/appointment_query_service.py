# ============================================================================
# FILE: app/services/appointment/appointment_query_service.py
# Pure business logic - no FastAPI dependencies, fully testable
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Dict, Any, List
from uuid import UUID

from app.core.exceptions import PermissionDeniedError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.organization import Organization
from app.schemas.actor import Actor
from app.services.appointment.permissions import actor_capabilities, is_org_privileged
from app.services.organization.organization_service import OrganizationService
from app.utils.time_utils import get_zone, local_day_bounds, parse_date, parse_hour


class AppointmentQueryService:
    """Read side for appointments, scoped by what the actor may see."""

    @staticmethod
    def visible_appointments_for_date(
            db: Session,
            organization: Organization,
            day: date,
            actor: Optional[Actor] = None
    ) -> List[Appointment]:
        """
        Appointments starting on the day, in the organization timezone.
        Owners and admins see all of them, other users only their own,
        anonymous visitors none.
        """
        if actor is None or not actor.authenticated:
            return []

        tz = get_zone(organization.timezone)
        day_start, day_end = local_day_bounds(day, tz)

        query = db.query(Appointment).filter(
            Appointment.organization_id == organization.id,
            Appointment.start_time >= day_start,
            Appointment.start_time < day_end
        )
        if not is_org_privileged(actor, organization):
            query = query.filter(Appointment.user_id == actor.id)

        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def get_appointments_by_date(
            db: Session,
            organization_id: UUID,
            day,
            actor: Optional[Actor] = None
    ) -> Dict[str, Any]:
        organization = OrganizationService.require_organization(db, organization_id)
        day = parse_date(day)
        appointments = AppointmentQueryService.visible_appointments_for_date(db, organization, day, actor)

        return {
            "organization_id": str(organization.id),
            "date": day.isoformat(),
            "total_appointments": len(appointments),
            "appointments": [
                AppointmentQueryService.serialize_appointment(appt, actor=actor, organization=organization)
                for appt in appointments
            ]
        }

    @staticmethod
    def get_organization_appointments(
            db: Session,
            organization_id: UUID,
            actor: Actor,
            day: Optional[str] = None,
            hour: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        All appointments of an organization (owner/admin only).
        With a date: that day, optionally narrowed to one hour.
        Without: upcoming ones, plus the closest non-cancelled one.
        """
        organization = OrganizationService.require_organization(db, organization_id)
        OrganizationService.require_authenticated(actor)
        if not is_org_privileged(actor, organization):
            raise PermissionDeniedError("You don't have permission to view these appointments!")

        tz = get_zone(organization.timezone)
        query = db.query(Appointment).filter(Appointment.organization_id == organization.id)

        if day:
            day = parse_date(day)
            range_start, range_end = local_day_bounds(day, tz)
            if hour:
                range_start = datetime.combine(day, parse_hour(hour), tzinfo=tz)
                range_end = range_start + timedelta(hours=1)
            query = query.filter(
                Appointment.start_time >= range_start,
                Appointment.start_time < range_end
            )
        else:
            query = query.filter(Appointment.start_time >= datetime.now(timezone.utc))

        appointments = query.order_by(Appointment.start_time.asc()).all()

        closest = None
        if not day and appointments:
            closest = next(
                (appt for appt in appointments if appt.status != AppointmentStatus.CANCELLED),
                appointments[0]
            )

        return {
            "organization_id": str(organization.id),
            "filters": {
                "date": day.isoformat() if day else None,
                "hour": hour if day else None,
            },
            "total_appointments": len(appointments),
            "appointments": [
                AppointmentQueryService.serialize_appointment(appt, actor=actor, organization=organization)
                for appt in appointments
            ],
            "closest_appointment": AppointmentQueryService.serialize_appointment(
                closest, actor=actor, organization=organization
            ) if closest else None,
        }

    @staticmethod
    def get_user_appointments(db: Session, actor: Actor) -> Dict[str, Any]:
        """Every appointment the actor booked, nearest first."""
        OrganizationService.require_authenticated(actor)

        appointments = db.query(Appointment).filter(
            Appointment.user_id == actor.id
        ).order_by(Appointment.start_time.asc()).all()

        return {
            "total_appointments": len(appointments),
            "appointments": [
                AppointmentQueryService.serialize_appointment(appt, actor=actor, detailed=True)
                for appt in appointments
            ]
        }

    @staticmethod
    def get_nearest_appointment(db: Session, actor: Actor) -> Optional[Dict[str, Any]]:
        """Next upcoming non-cancelled appointment of the actor, or None."""
        OrganizationService.require_authenticated(actor)

        appointment = db.query(Appointment).filter(
            Appointment.user_id == actor.id,
            Appointment.start_time >= datetime.now(timezone.utc),
            Appointment.status != AppointmentStatus.CANCELLED
        ).order_by(Appointment.start_time.asc()).first()

        if not appointment:
            return None

        return AppointmentQueryService.serialize_appointment(appointment, actor=actor, detailed=True)

    @staticmethod
    def serialize_appointment(
            appointment: Appointment,
            actor: Optional[Actor] = None,
            organization: Optional[Organization] = None,
            detailed: bool = False
    ) -> Dict[str, Any]:
        """Convert Appointment model to dictionary."""
        appointment_type = appointment.appointment_type
        user = appointment.user

        base = {
            "id": str(appointment.id),
            "organization_id": str(appointment.organization_id),
            "title": appointment.title,
            "description": appointment.description,
            "start_time": appointment.start_time.isoformat(),
            "end_time": appointment.end_time.isoformat(),
            "duration_minutes": appointment.duration_minutes,
            "status": appointment.status.value,
            "contact_name": appointment.contact_name,
            "contact_email": appointment.contact_email,
            "contact_phone": appointment.contact_phone,
            "notes": appointment.notes,
            "cancellation_reason": appointment.cancellation_reason,
            "appointment_type": {
                "id": str(appointment_type.id),
                "name": appointment_type.name,
                "color": appointment_type.color,
            } if appointment_type else None,
            "user": {
                "id": str(user.id),
                "name": user.full_name,
                "email": user.email,
            } if user else None,
            "capabilities": actor_capabilities(actor, appointment, organization).model_dump(),
        }

        if detailed:
            org = organization or appointment.organization
            base.update({
                "organization": {
                    "id": str(org.id),
                    "name": org.name,
                    "slug": org.slug,
                    "timezone": org.timezone,
                } if org else None,
                "created_at": appointment.created_at.isoformat() if appointment.created_at else None,
                "updated_at": appointment.updated_at.isoformat() if appointment.updated_at else None,
            })

        return base

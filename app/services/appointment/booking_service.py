# ============================================================================
# app/services/appointment/booking_service.py
# ============================================================================
"""Service for booking appointments into hour-slots"""

from typing import Optional
import logging

from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ValidationError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.notification import NotificationType
from app.schemas.actor import Actor
from app.schemas.appointment import AppointmentCreate
from app.services.availability import slot_resolver
from app.services.availability.availability_service import AvailabilityService
from app.services.appointment_type.appointment_type_service import AppointmentTypeService
from app.services.notification.notification_service import NotificationService
from app.services.organization.organization_service import OrganizationService
from app.utils.time_utils import add_elapsed_minutes, combine_local, format_display_time, format_hour, get_zone, parse_date, parse_hour

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("organization_id", "date", "hour", "title")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class BookingService:
    """Turns a slot selection into a PENDING appointment"""

    @staticmethod
    async def create_appointment(
            db: Session,
            actor: Actor,
            data: AppointmentCreate,
            notifier: Optional[NotificationService] = None
    ) -> Appointment:
        """
        Create a new appointment.

        Overlapping bookings are accepted: several appointments may share
        a slot and no conflict check is made.
        """
        actor = OrganizationService.require_authenticated(actor)
        settings = get_settings()

        missing = [field for field in REQUIRED_FIELDS if _is_blank(getattr(data, field))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        day = parse_date(data.date)
        hour = parse_hour(data.hour)

        organization = OrganizationService.require_organization(db, data.organization_id)

        appointment_type = None
        duration_minutes = settings.DEFAULT_APPOINTMENT_DURATION_MINUTES
        if data.appointment_type_id:
            appointment_type = AppointmentTypeService.get_bookable_type(
                db, organization.id, data.appointment_type_id
            )
            duration_minutes = appointment_type.duration_minutes

        if settings.ENFORCE_AVAILABILITY_ON_BOOKING:
            BookingService._ensure_slot_is_open(db, organization.id, day, hour)

        tz = get_zone(organization.timezone)
        start_time = combine_local(day, hour, tz)
        end_time = add_elapsed_minutes(start_time, duration_minutes)

        appointment = Appointment(
            organization_id=organization.id,
            appointment_type_id=appointment_type.id if appointment_type else None,
            user_id=actor.id,
            title=data.title.strip(),
            description=data.description or None,
            start_time=start_time,
            end_time=end_time,
            status=AppointmentStatus.PENDING,
            contact_name=data.contact_name or None,
            contact_email=data.contact_email or None,
            contact_phone=data.contact_phone or None,
            notes=data.notes or None,
        )

        db.add(appointment)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(appointment)

        logger.info(
            f"Booked appointment {appointment.id} for organization {organization.id} "
            f"at {start_time.isoformat()} ({duration_minutes} min)"
        )

        if notifier is not None:
            try:
                await notifier.notify_organization(
                    organization.id,
                    appointment.id,
                    NotificationType.APPOINTMENT_CREATED,
                    "New Appointment Created",
                    f'{actor.name or "A user"} has created a new appointment "{appointment.title}" '
                    f"on {format_display_time(start_time, tz)} in {organization.name}.",
                )
            except Exception as e:
                logger.error(f"Failed to notify organization {organization.id} about appointment {appointment.id}: {e}",
                             exc_info=True)

        return appointment

    @staticmethod
    def _ensure_slot_is_open(db: Session, organization_id, day, hour):
        rules = AvailabilityService.list_rules(db, organization_id)
        overrides = AvailabilityService.list_overrides(db, organization_id, day, day)

        status = slot_resolver.resolve_day_status(rules, overrides, day)
        if not status.available:
            raise ValidationError(status.reason)

        rule = slot_resolver.find_rule_for_date(rules, day)
        if format_hour(hour) not in slot_resolver.generate_hour_slots(
                rule, day, get_settings().SLOT_INTERVAL_MINUTES):
            raise ValidationError("Selected hour is outside the organization's open hours!")

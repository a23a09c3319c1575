# ============================================================================
# app/services/appointment/status_service.py
# ============================================================================
"""Appointment status transitions: confirm, cancel, complete, no-show"""
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.notification import NotificationType
from app.schemas.actor import Actor
from app.services.appointment.permissions import actor_capabilities, is_appointment_owner, is_org_privileged
from app.services.notification.notification_service import NotificationService
from app.services.organization.organization_service import OrganizationService
from app.utils.time_utils import format_display_time, get_zone

logger = logging.getLogger(__name__)

# Terminal states have no outgoing edges.
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.NO_SHOW,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.NO_SHOW,
    },
}

CAPABILITY_FOR_STATUS = {
    AppointmentStatus.CONFIRMED: "can_confirm",
    AppointmentStatus.CANCELLED: "can_cancel",
    AppointmentStatus.COMPLETED: "can_complete",
    AppointmentStatus.NO_SHOW: "can_mark_no_show",
}


class StatusTransitionService:

    @staticmethod
    async def update_status(
            db: Session,
            appointment_id: UUID,
            target_status: AppointmentStatus,
            actor: Actor,
            cancellation_reason: Optional[str] = None,
            notifier: Optional[NotificationService] = None
    ) -> Appointment:
        """
        Apply a status change after checking, in order: authentication,
        existence, permission, input validity, transition legality.

        The row is locked for the read-check-write so two concurrent
        changes cannot both pass the transition check.
        """
        target_status = AppointmentStatus(target_status)
        actor = OrganizationService.require_authenticated(actor)

        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).with_for_update(of=Appointment).first()
        if not appointment:
            raise NotFoundError("Appointment not found!")

        organization = appointment.organization

        capabilities = actor_capabilities(actor, appointment, organization)
        capability = CAPABILITY_FOR_STATUS.get(target_status)
        allowed = getattr(capabilities, capability) if capability else is_org_privileged(actor, organization)
        if not allowed:
            db.rollback()
            if target_status == AppointmentStatus.CANCELLED:
                raise PermissionDeniedError("You don't have permission to cancel this appointment!")
            raise PermissionDeniedError("You don't have permission to update this appointment!")

        reason = (cancellation_reason or "").strip()
        if target_status == AppointmentStatus.CANCELLED and not reason:
            db.rollback()
            raise ValidationError("Cancellation reason is required!")

        current_status = AppointmentStatus(appointment.status)
        if current_status == target_status:
            db.rollback()
            raise ConflictError(f"Appointment is already {current_status.value.lower()}!")
        if current_status == AppointmentStatus.COMPLETED:
            db.rollback()
            raise ConflictError("Cannot modify a completed appointment!")
        if target_status not in ALLOWED_TRANSITIONS.get(current_status, set()):
            db.rollback()
            raise ConflictError(
                f"Cannot change appointment from {current_status.value.lower()} to {target_status.value.lower()}!"
            )

        appointment.status = target_status
        appointment.cancellation_reason = reason if target_status == AppointmentStatus.CANCELLED else None

        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(appointment)

        logger.info(
            f"Appointment {appointment.id} moved {current_status.value} -> {target_status.value} by {actor.id}"
        )

        if notifier is not None and not is_appointment_owner(actor, appointment) \
                and is_org_privileged(actor, organization):
            await StatusTransitionService._notify_owner(notifier, appointment, organization, target_status, reason)

        return appointment

    @staticmethod
    async def _notify_owner(notifier, appointment, organization, target_status, reason):
        if target_status == AppointmentStatus.CONFIRMED:
            type_ = NotificationType.APPOINTMENT_CONFIRMED
            title = "Appointment Confirmed"
            verb = "confirmed"
        elif target_status == AppointmentStatus.CANCELLED:
            type_ = NotificationType.APPOINTMENT_CANCELLED
            title = "Appointment Cancelled by Organization"
            verb = "cancelled"
        else:
            return

        when = format_display_time(appointment.start_time, get_zone(organization.timezone))
        message = f'Your appointment "{appointment.title}" on {when} at {organization.name} has been {verb}.'
        if reason:
            message += f" Reason: {reason}"

        try:
            await notifier.notify_user(
                appointment.user_id,
                organization.id,
                appointment.id,
                type_,
                title,
                message,
            )
        except Exception as e:
            logger.error(f"Failed to notify user {appointment.user_id} about appointment {appointment.id}: {e}",
                         exc_info=True)

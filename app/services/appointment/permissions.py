# app/services/appointment/permissions.py
"""Single source of truth for what an actor may do with an appointment"""
from typing import Optional

from app.models.appointment import Appointment
from app.models.organization import Organization
from app.schemas.actor import Actor
from app.schemas.appointment import ActorCapabilities


def is_appointment_owner(actor: Optional[Actor], appointment: Appointment) -> bool:
    return bool(actor and actor.authenticated and actor.id is not None and appointment.user_id == actor.id)


def is_org_privileged(actor: Optional[Actor], organization: Organization) -> bool:
    """Organization owner or platform admin"""
    if actor is None or not actor.authenticated:
        return False
    return actor.is_admin or organization.is_owned_by(actor.id)


def actor_capabilities(
        actor: Optional[Actor],
        appointment: Appointment,
        organization: Optional[Organization] = None
) -> ActorCapabilities:
    """
    Role-based capabilities, independent of the appointment's current status.

    Used by the status transition service to authorize a change and by the
    query side to tell clients which actions to offer.
    """
    organization = organization or appointment.organization
    privileged = is_org_privileged(actor, organization)
    owner = is_appointment_owner(actor, appointment)

    return ActorCapabilities(
        can_confirm=privileged,
        can_cancel=privileged or owner,
        can_complete=privileged,
        can_mark_no_show=privileged,
    )

# app/services/organization/organization_service.py
"""Organization lookups and role checks shared by the scheduling services"""
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.models.availability import DayOfWeek
from app.models.organization import Organization
from app.schemas.actor import Actor
from app.services.appointment.permissions import is_org_privileged

logger = logging.getLogger(__name__)


class OrganizationService:
    """Read-side collaborator for organizations"""

    @staticmethod
    def get_organization(db: Session, organization_id: UUID) -> Optional[Organization]:
        return db.query(Organization).filter(Organization.id == organization_id).first()

    @staticmethod
    def require_organization(db: Session, organization_id: UUID) -> Organization:
        organization = OrganizationService.get_organization(db, organization_id)
        if not organization:
            raise NotFoundError("Organization not found!")
        return organization

    @staticmethod
    def require_authenticated(actor: Optional[Actor]) -> Actor:
        if actor is None or not actor.authenticated or actor.id is None:
            raise PermissionDeniedError("Unauthorized")
        return actor

    @staticmethod
    def is_privileged(actor: Optional[Actor], organization: Organization) -> bool:
        """Organization owner or platform admin"""
        return is_org_privileged(actor, organization)

    @staticmethod
    def require_member(actor: Optional[Actor], organization: Organization) -> Actor:
        actor = OrganizationService.require_authenticated(actor)
        if not organization.has_member(actor.id):
            raise PermissionDeniedError("You are not a member of this organization.")
        return actor

    @staticmethod
    def require_privileged(actor: Optional[Actor], organization: Organization, message: str) -> Actor:
        actor = OrganizationService.require_authenticated(actor)
        if not OrganizationService.is_privileged(actor, organization):
            raise PermissionDeniedError(message)
        return actor

    @staticmethod
    def get_public_profile(db: Session, organization_id: UUID) -> dict:
        """Organization with its weekly rules and blackout dates"""
        organization = OrganizationService.require_organization(db, organization_id)
        data = organization.to_dict()
        rules = sorted(organization.availability_rules, key=lambda r: DayOfWeek(r.day_of_week).index)
        data["availability_rules"] = [rule.to_dict() for rule in rules]
        data["date_overrides"] = [override.to_dict() for override in organization.date_overrides]
        return data

# app/services/appointment_type/appointment_type_service.py
"""Service for managing appointment types"""
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.appointment_type import AppointmentType
from app.schemas.actor import Actor
from app.schemas.appointment_type import AppointmentTypeCreate, AppointmentTypeUpdate
from app.services.organization.organization_service import OrganizationService

logger = logging.getLogger(__name__)


class AppointmentTypeService:
    """Handles appointment type operations"""

    @staticmethod
    def list_types(db: Session, organization_id: UUID, actor: Optional[Actor] = None) -> List[AppointmentType]:
        """Owners and admins see inactive types too"""
        organization = OrganizationService.require_organization(db, organization_id)

        query = db.query(AppointmentType).filter(AppointmentType.organization_id == organization.id)
        if not OrganizationService.is_privileged(actor, organization):
            query = query.filter(AppointmentType.is_active == True)

        return query.order_by(AppointmentType.created_at.desc(), AppointmentType.name.asc()).all()

    @staticmethod
    def get_bookable_type(db: Session, organization_id: UUID, appointment_type_id: UUID) -> AppointmentType:
        """Active type of this organization; anything else is treated as missing"""
        appointment_type = db.query(AppointmentType).filter(
            AppointmentType.id == appointment_type_id,
            AppointmentType.organization_id == organization_id,
            AppointmentType.is_active == True
        ).first()

        if not appointment_type:
            raise NotFoundError("Appointment type not found or inactive!")
        return appointment_type

    @staticmethod
    def create_type(
            db: Session,
            actor: Actor,
            organization_id: UUID,
            data: AppointmentTypeCreate
    ) -> AppointmentType:
        organization = OrganizationService.require_organization(db, organization_id)
        OrganizationService.require_privileged(
            actor, organization, "You don't have permission to add appointment types!"
        )

        appointment_type = AppointmentType(organization_id=organization.id, **data.model_dump())
        db.add(appointment_type)
        db.commit()
        db.refresh(appointment_type)

        logger.info(f"Created appointment type {appointment_type.name!r} for organization {organization_id}")
        return appointment_type

    @staticmethod
    def _get_for_management(db: Session, actor: Actor, appointment_type_id: UUID, message: str) -> AppointmentType:
        OrganizationService.require_authenticated(actor)
        appointment_type = db.query(AppointmentType).filter(AppointmentType.id == appointment_type_id).first()
        if not appointment_type:
            raise NotFoundError("Appointment type not found!")
        OrganizationService.require_privileged(actor, appointment_type.organization, message)
        return appointment_type

    @staticmethod
    def update_type(
            db: Session,
            actor: Actor,
            appointment_type_id: UUID,
            data: AppointmentTypeUpdate
    ) -> AppointmentType:
        appointment_type = AppointmentTypeService._get_for_management(
            db, actor, appointment_type_id, "You don't have permission to update this appointment type!"
        )

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "color":
                value = value or None
            elif value is None:
                continue
            setattr(appointment_type, field, value)

        db.commit()
        db.refresh(appointment_type)
        return appointment_type

    @staticmethod
    def delete_type(db: Session, actor: Actor, appointment_type_id: UUID) -> None:
        appointment_type = AppointmentTypeService._get_for_management(
            db, actor, appointment_type_id, "You don't have permission to delete this appointment type!"
        )
        db.delete(appointment_type)
        db.commit()

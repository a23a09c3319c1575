# ===== app/services/availability/availability_service.py =====
from typing import List, Dict, Optional
from uuid import UUID
from datetime import date
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.config.settings import get_settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.availability import AvailabilityRule, DateOverride, DayOfWeek
from app.schemas.actor import Actor
from app.schemas.availability import (
    DateOverrideCreate,
    DayStatus,
    WeeklyAvailabilityReplace,
    WeeklyAvailabilityUpdate,
)
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.availability import slot_resolver
from app.services.organization.organization_service import OrganizationService
from app.utils.time_utils import get_zone, parse_date, parse_hour, parse_month
import logging

logger = logging.getLogger(__name__)

DUPLICATE_OVERRIDE_MESSAGE = "This date is already marked as unavailable."


class AvailabilityService:
    """Weekly rules, blackout dates and the day/calendar views built on them"""

    # ========== READS ==========

    @staticmethod
    def list_rules(db: Session, organization_id: UUID) -> List[AvailabilityRule]:
        rules = db.query(AvailabilityRule).filter(
            AvailabilityRule.organization_id == organization_id
        ).all()
        return sorted(rules, key=lambda r: DayOfWeek(r.day_of_week).index)

    @staticmethod
    def list_overrides(
            db: Session,
            organization_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None
    ) -> List[DateOverride]:
        query = db.query(DateOverride).filter(DateOverride.organization_id == organization_id)
        if start_date and end_date:
            query = query.filter(DateOverride.date.between(start_date, end_date))
        return query.order_by(DateOverride.date.asc()).all()

    @staticmethod
    def get_day_status(db: Session, organization_id: UUID, day) -> DayStatus:
        OrganizationService.require_organization(db, organization_id)
        day = parse_date(day)
        return slot_resolver.resolve_day_status(
            AvailabilityService.list_rules(db, organization_id),
            AvailabilityService.list_overrides(db, organization_id, day, day),
            day,
        )

    @staticmethod
    def get_day_view(db: Session, organization_id: UUID, day, actor: Optional[Actor] = None) -> Dict:
        """Hour-by-hour occupancy; occupants are limited to what the actor may see"""
        organization = OrganizationService.require_organization(db, organization_id)
        day = parse_date(day)
        tz = get_zone(organization.timezone)

        appointments = AppointmentQueryService.visible_appointments_for_date(
            db, organization, day, actor
        )
        view = slot_resolver.build_day_view(
            AvailabilityService.list_rules(db, organization_id),
            AvailabilityService.list_overrides(db, organization_id, day, day),
            appointments,
            day,
            tz=tz,
            interval_minutes=get_settings().SLOT_INTERVAL_MINUTES,
        )

        view["organization_id"] = str(organization.id)
        view["timezone"] = organization.timezone
        for slot in view["slots"]:
            slot["appointments"] = [
                AppointmentQueryService.serialize_appointment(appt, actor=actor, organization=organization)
                for appt in slot["appointments"]
            ]
        return view

    @staticmethod
    def get_calendar(db: Session, organization_id: UUID, month: Optional[str] = None) -> Dict:
        """Per-day status for the full weeks spanning a month"""
        OrganizationService.require_organization(db, organization_id)
        month_start = parse_month(month)
        grid_start, grid_end = slot_resolver.calendar_grid_bounds(month_start)

        days = slot_resolver.resolve_calendar(
            AvailabilityService.list_rules(db, organization_id),
            AvailabilityService.list_overrides(db, organization_id, grid_start, grid_end),
            grid_start,
            grid_end,
        )
        return {
            "organization_id": str(organization_id),
            "month": month_start.strftime("%Y-%m"),
            "start": grid_start.isoformat(),
            "end": grid_end.isoformat(),
            "days": days,
        }

    # ========== WEEKLY RULES ==========

    @staticmethod
    def replace_weekly_availability(
            db: Session,
            actor: Actor,
            organization_id: UUID,
            data: WeeklyAvailabilityReplace
    ) -> List[AvailabilityRule]:
        """Delete every rule of the organization and insert the new set atomically"""
        organization = OrganizationService.require_organization(db, organization_id)
        OrganizationService.require_member(actor, organization)

        rules = [
            AvailabilityRule(
                organization_id=organization.id,
                day_of_week=item.day_of_week,
                start_time=parse_hour(item.start_time),
                end_time=parse_hour(item.end_time),
            )
            for item in data.availabilities
        ]

        try:
            db.query(AvailabilityRule).filter(
                AvailabilityRule.organization_id == organization.id
            ).delete(synchronize_session=False)
            # flush the delete first so the unique (org, day) index never sees both rows
            db.flush()
            db.add_all(rules)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.error(f"Weekly availability replace failed for organization {organization_id}: {e}")
            raise ConflictError("Weekly availability could not be saved, each day may appear only once.")
        except Exception:
            db.rollback()
            raise

        logger.info(f"Replaced weekly availability for organization {organization_id} ({len(rules)} rules)")
        db.expire(organization, ["availability_rules"])
        return AvailabilityService.list_rules(db, organization.id)

    @staticmethod
    def update_rule(
            db: Session,
            actor: Actor,
            rule_id: UUID,
            data: WeeklyAvailabilityUpdate
    ) -> AvailabilityRule:
        rule = db.query(AvailabilityRule).filter(AvailabilityRule.id == rule_id).first()
        if not rule:
            raise NotFoundError("Weekly availability not found.")
        OrganizationService.require_member(actor, rule.organization)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        start_time = parse_hour(changes.get("start_time", rule.start_time))
        end_time = parse_hour(changes.get("end_time", rule.end_time))
        if end_time <= start_time:
            raise ValidationError("End time must be after start time!")

        if "day_of_week" in changes:
            rule.day_of_week = changes["day_of_week"]
        rule.start_time = start_time
        rule.end_time = end_time

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Availability for this day of the week already exists.")

        db.refresh(rule)
        return rule

    @staticmethod
    def delete_rule(db: Session, actor: Actor, rule_id: UUID) -> None:
        rule = db.query(AvailabilityRule).filter(AvailabilityRule.id == rule_id).first()
        if not rule:
            raise NotFoundError("Weekly availability not found.")
        OrganizationService.require_member(actor, rule.organization)

        db.delete(rule)
        db.commit()

    # ========== DATE OVERRIDES ==========

    @staticmethod
    def create_date_override(
            db: Session,
            actor: Actor,
            organization_id: UUID,
            data: DateOverrideCreate
    ) -> DateOverride:
        organization = OrganizationService.require_organization(db, organization_id)
        OrganizationService.require_member(actor, organization)

        day = parse_date(data.date)

        existing = db.query(DateOverride).filter(
            DateOverride.organization_id == organization.id,
            DateOverride.date == day
        ).first()
        if existing:
            raise ConflictError(DUPLICATE_OVERRIDE_MESSAGE)

        override = DateOverride(
            organization_id=organization.id,
            date=day,
            reason=(data.reason or "").strip() or None,
        )
        db.add(override)
        try:
            db.commit()
        except IntegrityError:
            # concurrent insert beat the existence check
            db.rollback()
            raise ConflictError(DUPLICATE_OVERRIDE_MESSAGE)

        db.refresh(override)
        logger.info(f"Marked {day.isoformat()} unavailable for organization {organization_id}")
        return override

    @staticmethod
    def delete_date_override(db: Session, actor: Actor, override_id: UUID) -> None:
        override = db.query(DateOverride).filter(DateOverride.id == override_id).first()
        if not override:
            raise NotFoundError("Unavailable date not found.")
        OrganizationService.require_member(actor, override.organization)

        db.delete(override)
        db.commit()

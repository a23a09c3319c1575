# ===== app/models/availability.py =====
import enum
import uuid

from sqlalchemy import (
    Column, String, Time, Date, DateTime, ForeignKey, UniqueConstraint, CheckConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.models.base import Base


class DayOfWeek(str, enum.Enum):
    """Weekday of a recurring rule, ordered like date.weekday()"""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def index(self) -> int:
        return list(DayOfWeek).index(self)

    @classmethod
    def from_date(cls, value) -> "DayOfWeek":
        return list(cls)[value.weekday()]


class AvailabilityRule(Base):
    """Recurring weekly open hours of an organization"""
    __tablename__ = "availability_rules"
    __table_args__ = (
        UniqueConstraint("organization_id", "day_of_week", name="uq_availability_rules_org_day"),
        CheckConstraint("end_time > start_time", name="ck_availability_rules_time_order"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    day_of_week = Column(SQLEnum(DayOfWeek), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    organization = relationship("Organization", back_populates="availability_rules")

    def to_dict(self):
        return {
            "id": str(self.id),
            "organization_id": str(self.organization_id),
            "day_of_week": self.day_of_week.value,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }


class DateOverride(Base):
    """Specific blackout dates (holidays, time-off); always a full day off"""
    __tablename__ = "date_overrides"
    __table_args__ = (
        UniqueConstraint("organization_id", "date", name="uq_date_overrides_org_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(
        UUID(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)  # "Holiday", "Vacation", etc.

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    organization = relationship("Organization", back_populates="date_overrides")

    def to_dict(self):
        return {
            "id": str(self.id),
            "organization_id": str(self.organization_id),
            "date": self.date.isoformat(),
            "reason": self.reason,
        }

# app/models/organization.py
"""
Organization Model - tenant root for all scheduling data
"""
from sqlalchemy import (
    Column, String, Boolean, DateTime, Text, Table, ForeignKey, UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from app.models.base import Base


class OrganizationRole(str, enum.Enum):
    """User roles within an organization."""
    OWNER = "owner"
    MEMBER = "member"


# Association table for many-to-many User <-> Organization relationship with roles
organization_members = Table(
    'organization_members',
    Base.metadata,
    Column('id', UUID(as_uuid=True), primary_key=True, default=uuid.uuid4),
    Column('user_id', UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    Column('organization_id', UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
    Column('role', SQLEnum(OrganizationRole), default=OrganizationRole.MEMBER, nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now()),
    UniqueConstraint('user_id', 'organization_id', name='uq_organization_members_user_org'),
)


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    slug = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    # Single fixed timezone for every schedule of this organization
    timezone = Column(String(50), default="Europe/Istanbul", nullable=False)

    # The creating user is the organization owner
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner = relationship("User", foreign_keys=[owner_id], lazy="joined")
    members = relationship(
        "User",
        secondary=organization_members,
        back_populates="organizations",
        lazy="selectin"
    )
    availability_rules = relationship(
        "AvailabilityRule",
        back_populates="organization",
        cascade="all, delete-orphan",
    )
    date_overrides = relationship(
        "DateOverride",
        back_populates="organization",
        cascade="all, delete-orphan",
        order_by="DateOverride.date",
    )
    appointment_types = relationship(
        "AppointmentType",
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Organization(id={self.id}, name={self.name})>"

    def is_owned_by(self, user_id) -> bool:
        return user_id is not None and self.owner_id == user_id

    def has_member(self, user_id) -> bool:
        """Owner counts as a member"""
        if user_id is None:
            return False
        return self.is_owned_by(user_id) or any(m.id == user_id for m in self.members)

    def recipient_ids(self) -> list:
        """Owner plus members, deduplicated, owner first"""
        ids = [self.owner_id]
        for member in self.members:
            if member.id not in ids:
                ids.append(member.id)
        return ids

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "timezone": self.timezone,
            "owner_id": str(self.owner_id),
            "is_active": self.is_active,
            "is_public": self.is_public,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

# ============================================================================
# FILE: app/models/user.py
# Platform users; platform role (admin/user) is separate from organization roles
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from app.models.base import Base
from app.models.organization import organization_members


class PlatformRole(str, enum.Enum):
    """Platform-level user roles."""
    ADMIN = "admin"    # Platform admin - can manage every organization
    USER = "user"      # Regular user - can own/join organizations and book


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)

    role = Column(
        SQLEnum(PlatformRole),
        default=PlatformRole.USER,
        nullable=False,
        index=True
    )

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    organizations = relationship(
        "Organization",
        secondary=organization_members,
        back_populates="members",
        lazy="selectin"
    )

    def is_platform_admin(self) -> bool:
        """Check if user is a platform admin."""
        return self.role == PlatformRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "A user"

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

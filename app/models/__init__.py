# app/models/__init__.py
from .base import Base
from .organization import Organization, OrganizationRole, organization_members
from .user import User, PlatformRole
from .availability import AvailabilityRule, DateOverride, DayOfWeek
from .appointment_type import AppointmentType
from .appointment import Appointment, AppointmentStatus
from .notification import Notification, NotificationType

__all__ = [
    "Base",
    "Organization",
    "OrganizationRole",
    "organization_members",
    "User",
    "PlatformRole",
    "AvailabilityRule",
    "DateOverride",
    "DayOfWeek",
    "AppointmentType",
    "Appointment",
    "AppointmentStatus",
    "Notification",
    "NotificationType",
]

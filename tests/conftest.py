"""
Pytest configuration and fixtures.

Runs every test against an in-memory SQLite database; the notification
publisher is replaced by an in-process fake.
"""
import os

# Must be set before app modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NOTIFICATIONS_REALTIME_ENABLED", "false")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")

from datetime import time
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import (
    AvailabilityRule,
    AppointmentType,
    Base,
    DateOverride,
    DayOfWeek,
    Organization,
    PlatformRole,
    User,
)
from app.schemas.actor import Actor
from app.services.notification.notification_service import NotificationService

from fakes import FakePublisher


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(db):
    def _make_user(name="Ada Lovelace", role=PlatformRole.USER):
        user = User(
            email=f"{uuid.uuid4().hex[:10]}@example.com",
            full_name=name,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user("Olivia Owner")


@pytest.fixture
def member(make_user):
    return make_user("Milo Member")


@pytest.fixture
def customer(make_user):
    return make_user("Casey Customer")


@pytest.fixture
def admin(make_user):
    return make_user("Ari Admin", role=PlatformRole.ADMIN)


@pytest.fixture
def organization(db, owner, member):
    organization = Organization(
        name="Harbor Dental",
        slug=f"harbor-{uuid.uuid4().hex[:8]}",
        timezone="UTC",
        owner_id=owner.id,
    )
    organization.members.append(member)
    db.add(organization)
    db.commit()
    db.refresh(organization)
    return organization


@pytest.fixture
def weekday_rules(db, organization):
    """Monday to Friday, 09:00-17:00"""
    rules = [
        AvailabilityRule(
            organization_id=organization.id,
            day_of_week=day,
            start_time=time(9, 0),
            end_time=time(17, 0),
        )
        for day in (
            DayOfWeek.MONDAY,
            DayOfWeek.TUESDAY,
            DayOfWeek.WEDNESDAY,
            DayOfWeek.THURSDAY,
            DayOfWeek.FRIDAY,
        )
    ]
    db.add_all(rules)
    db.commit()
    return rules


@pytest.fixture
def make_override(db, organization):
    def _make_override(day, reason=None):
        override = DateOverride(organization_id=organization.id, date=day, reason=reason)
        db.add(override)
        db.commit()
        db.refresh(override)
        return override

    return _make_override


@pytest.fixture
def consultation(db, organization):
    appointment_type = AppointmentType(
        organization_id=organization.id,
        name="Consultation",
        duration_minutes=30,
        color="#3366FF",
    )
    db.add(appointment_type)
    db.commit()
    db.refresh(appointment_type)
    return appointment_type


# ============================================================================
# Actors and notifications
# ============================================================================

@pytest.fixture
def actor_for():
    return Actor.from_user


@pytest.fixture
def anonymous():
    return Actor.anonymous()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def notifier(db, publisher):
    return NotificationService(db, publisher=publisher)

"""Read side: per-date, per-organization and per-user appointment listings."""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import PermissionDeniedError, ValidationError
from app.models import Appointment, AppointmentStatus
from app.services.appointment.appointment_query_service import AppointmentQueryService


@pytest.fixture
def book(db, organization):
    def _book(user, start, status=AppointmentStatus.PENDING, title="Visit"):
        appointment = Appointment(
            organization_id=organization.id,
            user_id=user.id,
            title=title,
            start_time=start,
            end_time=start + timedelta(hours=1),
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _book


def _at(day, hour):
    return datetime(2099, 3, day, hour, 0, tzinfo=timezone.utc)


def test_by_date_scopes_to_actor(db, organization, owner, customer, make_user, actor_for, anonymous, book):
    other = make_user("Other")
    book(customer, _at(2, 10))
    book(other, _at(2, 11))
    book(customer, _at(3, 10))

    as_owner = AppointmentQueryService.get_appointments_by_date(db, organization.id, "2099-03-02", actor_for(owner))
    as_customer = AppointmentQueryService.get_appointments_by_date(
        db, organization.id, "2099-03-02", actor_for(customer)
    )
    as_anonymous = AppointmentQueryService.get_appointments_by_date(db, organization.id, "2099-03-02", anonymous)

    assert as_owner["total_appointments"] == 2
    assert as_customer["total_appointments"] == 1
    assert as_anonymous["total_appointments"] == 0


def test_organization_listing_requires_privilege(db, organization, member, actor_for):
    with pytest.raises(PermissionDeniedError):
        AppointmentQueryService.get_organization_appointments(db, organization.id, actor_for(member))


def test_organization_listing_by_date_and_hour(db, organization, owner, customer, actor_for, book):
    book(customer, _at(2, 10), title="Ten")
    book(customer, _at(2, 14), title="Two")

    whole_day = AppointmentQueryService.get_organization_appointments(
        db, organization.id, actor_for(owner), day="2099-03-02"
    )
    one_hour = AppointmentQueryService.get_organization_appointments(
        db, organization.id, actor_for(owner), day="2099-03-02", hour="14:00"
    )

    assert whole_day["total_appointments"] == 2
    assert whole_day["closest_appointment"] is None
    assert [a["title"] for a in one_hour["appointments"]] == ["Two"]
    assert one_hour["filters"] == {"date": "2099-03-02", "hour": "14:00"}


def test_organization_listing_rejects_bad_hour(db, organization, owner, actor_for):
    with pytest.raises(ValidationError):
        AppointmentQueryService.get_organization_appointments(
            db, organization.id, actor_for(owner), day="2099-03-02", hour="2pm"
        )


def test_upcoming_listing_skips_cancelled_for_closest(db, organization, admin, customer, actor_for, book):
    book(customer, _at(2, 9), status=AppointmentStatus.CANCELLED, title="Cancelled")
    book(customer, _at(2, 12), title="Next")

    result = AppointmentQueryService.get_organization_appointments(db, organization.id, actor_for(admin))

    assert result["total_appointments"] == 2
    assert result["closest_appointment"]["title"] == "Next"


def test_user_appointments_and_nearest(db, customer, owner, actor_for, book):
    book(customer, _at(5, 9), title="Later")
    book(customer, _at(2, 9), status=AppointmentStatus.CANCELLED, title="Dropped")
    book(customer, _at(3, 9), title="Sooner")
    book(owner, _at(1, 9), title="Not mine")

    mine = AppointmentQueryService.get_user_appointments(db, actor_for(customer))
    nearest = AppointmentQueryService.get_nearest_appointment(db, actor_for(customer))

    assert [a["title"] for a in mine["appointments"]] == ["Dropped", "Sooner", "Later"]
    assert mine["appointments"][0]["organization"]["name"] == "Harbor Dental"
    assert nearest["title"] == "Sooner"


def test_no_nearest_appointment(db, customer, actor_for):
    assert AppointmentQueryService.get_nearest_appointment(db, actor_for(customer)) is None

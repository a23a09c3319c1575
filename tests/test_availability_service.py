"""Weekly availability, blackout dates and the day/calendar views."""
from datetime import date, datetime, time, timezone
import uuid

import pytest

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models import Appointment, AvailabilityRule, DateOverride, DayOfWeek
from app.schemas.availability import (
    DateOverrideCreate,
    WeeklyAvailabilityReplace,
    WeeklyAvailabilityUpdate,
)
from app.services.availability.availability_service import AvailabilityService


def _weekly(*items):
    return WeeklyAvailabilityReplace(availabilities=[
        {"day_of_week": day, "start_time": start, "end_time": end} for day, start, end in items
    ])


class TestWeeklyAvailability:

    def test_replace_swaps_the_whole_week(self, db, organization, weekday_rules, owner, actor_for):
        rules = AvailabilityService.replace_weekly_availability(
            db, actor_for(owner), organization.id,
            _weekly(("SATURDAY", "10:00", "14:00"), ("MONDAY", "08:00", "12:00")),
        )

        assert [r.day_of_week for r in rules] == [DayOfWeek.MONDAY, DayOfWeek.SATURDAY]
        assert db.query(AvailabilityRule).count() == 2

    def test_member_may_replace(self, db, organization, member, actor_for):
        rules = AvailabilityService.replace_weekly_availability(
            db, actor_for(member), organization.id, _weekly(("FRIDAY", "09:00", "12:00"))
        )

        assert len(rules) == 1

    def test_outsider_may_not_replace(self, db, organization, weekday_rules, customer, actor_for):
        with pytest.raises(PermissionDeniedError):
            AvailabilityService.replace_weekly_availability(
                db, actor_for(customer), organization.id, _weekly(("FRIDAY", "09:00", "12:00"))
            )

        assert db.query(AvailabilityRule).count() == 5

    def test_empty_list_clears_the_week(self, db, organization, weekday_rules, owner, actor_for):
        rules = AvailabilityService.replace_weekly_availability(db, actor_for(owner), organization.id, _weekly())

        assert rules == []

    def test_duplicate_days_are_rejected_by_the_schema(self):
        with pytest.raises(ValueError):
            _weekly(("MONDAY", "09:00", "12:00"), ("MONDAY", "13:00", "17:00"))

    def test_end_before_start_is_rejected_by_the_schema(self):
        with pytest.raises(ValueError):
            _weekly(("MONDAY", "17:00", "09:00"))

    def test_update_rule_hours(self, db, organization, weekday_rules, owner, actor_for):
        rule = weekday_rules[0]

        updated = AvailabilityService.update_rule(
            db, actor_for(owner), rule.id, WeeklyAvailabilityUpdate(end_time="12:00")
        )

        assert updated.start_time == time(9, 0)
        assert updated.end_time == time(12, 0)

    def test_update_rule_rejects_inverted_window(self, db, weekday_rules, owner, actor_for):
        with pytest.raises(ValidationError):
            AvailabilityService.update_rule(
                db, actor_for(owner), weekday_rules[0].id, WeeklyAvailabilityUpdate(start_time="18:00")
            )

    def test_update_rule_onto_taken_day_conflicts(self, db, weekday_rules, owner, actor_for):
        with pytest.raises(ConflictError):
            AvailabilityService.update_rule(
                db, actor_for(owner), weekday_rules[0].id, WeeklyAvailabilityUpdate(day_of_week="TUESDAY")
            )

    def test_delete_rule(self, db, weekday_rules, owner, actor_for):
        AvailabilityService.delete_rule(db, actor_for(owner), weekday_rules[0].id)

        assert db.query(AvailabilityRule).count() == 4

    def test_delete_unknown_rule(self, db, owner, actor_for):
        with pytest.raises(NotFoundError):
            AvailabilityService.delete_rule(db, actor_for(owner), uuid.uuid4())


class TestDateOverrides:

    def test_create_override(self, db, organization, owner, actor_for):
        override = AvailabilityService.create_date_override(
            db, actor_for(owner), organization.id, DateOverrideCreate(date="2024-01-08", reason=" Holiday ")
        )

        assert override.date == date(2024, 1, 8)
        assert override.reason == "Holiday"

    def test_timestamp_input_keeps_calendar_date(self, db, organization, owner, actor_for):
        override = AvailabilityService.create_date_override(
            db, actor_for(owner), organization.id, DateOverrideCreate(date="2024-01-08T00:00:00+03:00")
        )

        assert override.date == date(2024, 1, 8)
        assert override.reason is None

    def test_duplicate_date_conflicts(self, db, organization, owner, actor_for, make_override):
        make_override(date(2024, 1, 8), "Holiday")

        with pytest.raises(ConflictError) as exc_info:
            AvailabilityService.create_date_override(
                db, actor_for(owner), organization.id, DateOverrideCreate(date="2024-01-08")
            )

        assert exc_info.value.message == "This date is already marked as unavailable."

    def test_invalid_date(self, db, organization, owner, actor_for):
        with pytest.raises(ValidationError):
            AvailabilityService.create_date_override(
                db, actor_for(owner), organization.id, DateOverrideCreate(date="next monday")
            )

    def test_outsider_cannot_create(self, db, organization, customer, actor_for):
        with pytest.raises(PermissionDeniedError):
            AvailabilityService.create_date_override(
                db, actor_for(customer), organization.id, DateOverrideCreate(date="2024-01-08")
            )

    def test_delete_override(self, db, owner, actor_for, make_override):
        override = make_override(date(2024, 1, 8))

        AvailabilityService.delete_date_override(db, actor_for(owner), override.id)

        assert db.query(DateOverride).count() == 0

    def test_delete_unknown_override(self, db, owner, actor_for):
        with pytest.raises(NotFoundError):
            AvailabilityService.delete_date_override(db, actor_for(owner), uuid.uuid4())


class TestViews:

    def test_holiday_overrides_monday_rule(self, db, organization, weekday_rules, make_override):
        make_override(date(2024, 1, 8), "Holiday")

        status = AvailabilityService.get_day_status(db, organization.id, "2024-01-08")

        assert status.available is False
        assert status.reason == "Holiday"

    def test_unknown_organization(self, db):
        with pytest.raises(NotFoundError):
            AvailabilityService.get_day_status(db, uuid.uuid4(), "2024-01-08")

    def test_day_view_occupants_depend_on_actor(self, db, organization, weekday_rules, owner, customer,
                                                make_user, actor_for, anonymous):
        other = make_user("Other Booker")
        for booker in (customer, other):
            db.add(Appointment(
                organization_id=organization.id,
                user_id=booker.id,
                title="Visit",
                start_time=datetime(2024, 1, 8, 10, 0, tzinfo=timezone.utc),
                end_time=datetime(2024, 1, 8, 11, 0, tzinfo=timezone.utc),
            ))
        db.commit()

        def occupants(actor):
            view = AvailabilityService.get_day_view(db, organization.id, "2024-01-08", actor)
            slot = next(s for s in view["slots"] if s["hour"] == "10:00")
            return slot["appointments"]

        assert len(occupants(actor_for(owner))) == 2
        assert [a["user"]["id"] for a in occupants(actor_for(customer))] == [str(customer.id)]
        assert occupants(anonymous) == []

    def test_day_view_capabilities_follow_actor(self, db, organization, weekday_rules, owner, customer, actor_for):
        db.add(Appointment(
            organization_id=organization.id,
            user_id=customer.id,
            title="Visit",
            start_time=datetime(2024, 1, 8, 9, 0, tzinfo=timezone.utc),
            end_time=datetime(2024, 1, 8, 10, 0, tzinfo=timezone.utc),
        ))
        db.commit()

        owner_view = AvailabilityService.get_day_view(db, organization.id, "2024-01-08", actor_for(owner))
        customer_view = AvailabilityService.get_day_view(db, organization.id, "2024-01-08", actor_for(customer))

        assert owner_view["slots"][0]["appointments"][0]["capabilities"] == {
            "can_confirm": True, "can_cancel": True, "can_complete": True, "can_mark_no_show": True,
        }
        assert customer_view["slots"][0]["appointments"][0]["capabilities"] == {
            "can_confirm": False, "can_cancel": True, "can_complete": False, "can_mark_no_show": False,
        }

    def test_calendar_month(self, db, organization, weekday_rules, make_override):
        make_override(date(2024, 1, 8), "Holiday")

        calendar = AvailabilityService.get_calendar(db, organization.id, "2024-01")

        assert calendar["start"] == "2024-01-01"
        assert calendar["end"] == "2024-02-04"
        by_date = {day["date"]: day for day in calendar["days"]}
        assert by_date["2024-01-08"] == {"date": "2024-01-08", "available": False, "reason": "Holiday"}
        assert by_date["2024-01-09"]["available"] is True
        assert by_date["2024-01-13"]["available"] is False

    def test_calendar_rejects_bad_month(self, db, organization):
        with pytest.raises(ValidationError):
            AvailabilityService.get_calendar(db, organization.id, "January")

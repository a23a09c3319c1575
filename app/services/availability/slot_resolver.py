# ============================================================================
# app/services/availability/slot_resolver.py
# Pure availability computation - no database access, no side effects
# ============================================================================
"""
Resolve whether an organization is bookable on a date and how its
hour-slots are occupied.

Inputs are plain sequences of rules, overrides and appointments (ORM rows or
any object with the same attributes), so every function here is
deterministic and can be called with in-memory data.

Slot boundary contract: slots are half-open, ``[start, end)``. A rule from
09:00 to 17:00 yields 09:00 .. 16:00, and an appointment starting exactly
at 10:00 occupies the 10:00 slot only.
"""
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from app.models.availability import DayOfWeek
from app.schemas.availability import DayStatus
from app.utils.time_utils import format_hour, parse_date, parse_hour, to_local

SLOT_MINUTES = 60

OVERRIDE_FALLBACK_REASON = "This date is marked as unavailable"
CLOSED_WEEKDAY_REASON = "Not available on this day of the week"


def find_override_for_date(overrides: Iterable, day) -> Optional[object]:
    target = parse_date(day)
    return next((o for o in overrides if parse_date(o.date) == target), None)


def find_rule_for_date(rules: Iterable, day) -> Optional[object]:
    weekday = DayOfWeek.from_date(parse_date(day))
    return next((r for r in rules if DayOfWeek(r.day_of_week) == weekday), None)


def resolve_day_status(rules: Sequence, overrides: Sequence, day) -> DayStatus:
    """Blackout beats weekly rule; no rule for the weekday means closed"""
    override = find_override_for_date(overrides, day)
    if override is not None:
        return DayStatus(available=False, reason=override.reason or OVERRIDE_FALLBACK_REASON)

    if find_rule_for_date(rules, day) is not None:
        return DayStatus(available=True, reason=None)

    return DayStatus(available=False, reason=CLOSED_WEEKDAY_REASON)


def generate_hour_slots(rule, day, interval_minutes: int = SLOT_MINUTES) -> List[str]:
    """HH:mm slot starts inside ``[rule.start_time, rule.end_time)``"""
    if rule is None:
        return []

    day = parse_date(day)
    current = datetime.combine(day, parse_hour(rule.start_time))
    day_end = datetime.combine(day, parse_hour(rule.end_time))
    step = timedelta(minutes=interval_minutes)

    slots = []
    while current < day_end:
        slots.append(format_hour(current))
        current += step

    return slots


def occupancy_for_slot(
        appointments: Iterable,
        day,
        hour,
        tz: Optional[tzinfo] = None,
        interval_minutes: int = SLOT_MINUTES
) -> List:
    """Appointments whose start lies in ``[hour, hour + interval)`` on the day"""
    slot_start = datetime.combine(parse_date(day), parse_hour(hour))
    slot_end = slot_start + timedelta(minutes=interval_minutes)

    return [
        appointment for appointment in appointments
        if slot_start <= to_local(appointment.start_time, tz) < slot_end
    ]


def build_day_view(
        rules: Sequence,
        overrides: Sequence,
        appointments: Sequence,
        day,
        tz: Optional[tzinfo] = None,
        interval_minutes: int = SLOT_MINUTES
) -> Dict:
    """Day status plus every open slot with its occupants"""
    day = parse_date(day)
    status = resolve_day_status(rules, overrides, day)

    slots = []
    if status.available:
        rule = find_rule_for_date(rules, day)
        for hour in generate_hour_slots(rule, day, interval_minutes):
            slots.append({
                "hour": hour,
                "appointments": occupancy_for_slot(appointments, day, hour, tz, interval_minutes),
            })

    return {
        "date": day.isoformat(),
        "day_of_week": DayOfWeek.from_date(day).value,
        "available": status.available,
        "reason": status.reason,
        "slots": slots,
    }


def resolve_calendar(rules: Sequence, overrides: Sequence, start, end) -> List[Dict]:
    """Status for every date from start to end, both inclusive"""
    current = parse_date(start)
    last = parse_date(end)

    days = []
    while current <= last:
        status = resolve_day_status(rules, overrides, current)
        days.append({
            "date": current.isoformat(),
            "available": status.available,
            "reason": status.reason,
        })
        current += timedelta(days=1)

    return days


def calendar_grid_bounds(month_start: date) -> tuple:
    """Whole Monday-to-Sunday weeks covering the month"""
    month_start = month_start.replace(day=1)
    next_month = (month_start.replace(day=28) + timedelta(days=4)).replace(day=1)
    month_end = next_month - timedelta(days=1)

    grid_start = month_start - timedelta(days=month_start.weekday())
    grid_end = month_end + timedelta(days=6 - month_end.weekday())
    return grid_start, grid_end

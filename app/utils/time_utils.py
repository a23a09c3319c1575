# app/utils/time_utils.py
"""Date/time parsing and organization-timezone helpers"""
import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config.settings import get_settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_HOUR_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DISPLAY_FORMAT = "%A, %B %d at %I:%M %p"


def parse_date(value: Union[str, date, datetime, None]) -> date:
    """
    Reduce a date, datetime or ISO string to a calendar date.

    Datetimes keep their wall-clock date; no timezone conversion happens,
    so a stored midnight never drifts to the previous day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Invalid date format!")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError("Invalid date format!")


def parse_hour(value: Union[str, time, None]) -> time:
    """Parse an HH:mm string (or pass a time through)"""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str) or not _HOUR_RE.match(value.strip()):
        raise ValidationError("Invalid time format, expected HH:mm!")
    hours, minutes = value.strip().split(":")
    return time(int(hours), int(minutes))


def format_hour(value: Union[time, datetime]) -> str:
    return value.strftime("%H:%M")


def get_zone(name: Optional[str]) -> tzinfo:
    """Resolve an IANA timezone name, falling back to the configured default"""
    settings = get_settings()
    try:
        return ZoneInfo(name or settings.DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, using {settings.DEFAULT_TIMEZONE}")
        return ZoneInfo(settings.DEFAULT_TIMEZONE)


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Naive wall-clock time in the organization timezone.

    Naive values are assumed to already be wall-clock (SQLite drops offsets).
    """
    if value.tzinfo is None:
        return value
    if tz is not None:
        value = value.astimezone(tz)
    return value.replace(tzinfo=None)


def combine_local(day: date, hour: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, hour, tzinfo=tz)


def add_elapsed_minutes(start: datetime, minutes: int) -> datetime:
    """Add elapsed minutes in UTC, then convert back to the start's zone"""
    if start.tzinfo is None:
        return start + timedelta(minutes=minutes)
    return (start.astimezone(timezone.utc) + timedelta(minutes=minutes)).astimezone(start.tzinfo)


def local_day_bounds(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """[start of day, start of next day) as aware datetimes"""
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start + timedelta(days=1)


def format_display_time(value: datetime, tz: Optional[tzinfo] = None) -> str:
    return to_local(value, tz).strftime(DISPLAY_FORMAT)


def parse_month(value: Optional[str]) -> date:
    """YYYY-MM -> first day of that month; None -> current month"""
    if not value:
        return date.today().replace(day=1)
    try:
        return datetime.strptime(value.strip(), "%Y-%m").date()
    except ValueError:
        raise ValidationError("Invalid month format, expected YYYY-MM!")

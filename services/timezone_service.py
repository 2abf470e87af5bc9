"""Timezone handling service for EcoTracker.

Streaks, daily buckets and weekly trends all need to agree on what a "day"
is. The application uses one fixed timezone for that (``APP_TIMEZONE`` in the
config, UTC by default). Stored datetimes are UTC; naive datetimes are taken
to be UTC.
"""
from datetime import datetime, date, time
from typing import Optional, Tuple
import pytz
from flask import current_app, has_app_context
from pytz import timezone as pytz_timezone

DEFAULT_TIMEZONE = 'UTC'


def get_timezone_object(timezone_str: str) -> pytz.BaseTzInfo:
    """Get timezone object from timezone string."""
    try:
        return pytz_timezone(timezone_str)
    except pytz.exceptions.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def app_timezone() -> str:
    """The configured application timezone, or UTC outside an app context."""
    if has_app_context():
        return current_app.config.get('APP_TIMEZONE', DEFAULT_TIMEZONE)
    return DEFAULT_TIMEZONE


def convert_utc_to_user_time(user_timezone: str, utc_datetime: datetime) -> Tuple[datetime, date, time]:
    """
    Convert UTC datetime to local time in the given timezone.

    Args:
        user_timezone: Timezone string
        utc_datetime: UTC datetime (naive values are treated as UTC)

    Returns:
        Tuple of (local_datetime, local_date, local_time)
    """
    # Ensure UTC datetime is timezone-aware
    if utc_datetime.tzinfo is None:
        utc_datetime = pytz.UTC.localize(utc_datetime)
    elif utc_datetime.tzinfo != pytz.UTC:
        utc_datetime = utc_datetime.astimezone(pytz.UTC)

    local_tz = get_timezone_object(user_timezone)
    local_datetime = utc_datetime.astimezone(local_tz)

    return local_datetime, local_datetime.date(), local_datetime.time()


def to_local_date(instant: datetime, tz: Optional[str] = None) -> date:
    """Calendar day of an instant in ``tz`` (the application timezone by default)."""
    _, local_date, _ = convert_utc_to_user_time(tz or app_timezone(), instant)
    return local_date


def get_current_user_time(user_timezone: str) -> Tuple[datetime, date, time]:
    """
    Get current time in the given timezone.

    Returns:
        Tuple of (local_datetime, local_date, local_time)
    """
    utc_now = datetime.now(pytz.UTC)
    return convert_utc_to_user_time(user_timezone, utc_now)


def local_today(tz: Optional[str] = None) -> date:
    _, today, _ = get_current_user_time(tz or app_timezone())
    return today


def validate_timezone(timezone_str: str) -> bool:
    """
    Validate if timezone string is valid.

    Args:
        timezone_str: Timezone string to validate

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz_timezone(timezone_str)
        return True
    except pytz.exceptions.UnknownTimeZoneError:
        return False

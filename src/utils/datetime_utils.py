"""
Datetime utilities for consistent timezone handling across the application.

Audit timestamps (created_at, updated_at) are timezone-aware in clinic local
time (Brasília, UTC-3; Brazil has not observed DST since 2019). Appointment
times are stored as naive local wall-clock values and are never converted.
"""

import logging
from datetime import datetime, timezone, timedelta, date, time
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Brasília timezone constant (UTC-3)
CLINIC_TZ = timezone(timedelta(hours=-3))


def clinic_now() -> datetime:
    """
    Get current clinic datetime (UTC-3).

    Returns:
        Current datetime with clinic timezone
    """
    return datetime.now(CLINIC_TZ)


def ensure_clinic_tz(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in clinic timezone.

    Naive datetimes are assumed to already be clinic local time.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=CLINIC_TZ)
    return dt.astimezone(CLINIC_TZ)


def compute_appointment_window(
    appointment_date: date,
    start: time,
    duration_minutes: int
) -> Tuple[datetime, datetime]:
    """
    Derive naive local start/end datetimes for an appointment.

    The end is always exactly start + duration_minutes of wall-clock time,
    even when it crosses midnight.

    Args:
        appointment_date: Calendar date of the appointment
        start: Local start time
        duration_minutes: Appointment length in minutes (must be positive)

    Returns:
        Tuple of (start_time, end_time) as naive datetimes

    Raises:
        ValueError: If duration_minutes is not positive
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    start_dt = datetime.combine(appointment_date, start.replace(tzinfo=None))
    return start_dt, start_dt + timedelta(minutes=duration_minutes)


def day_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
    """
    Half-open naive datetime bounds covering whole calendar days.

    Returns (start_date 00:00, day after end_date 00:00), so a datetime
    falls on a day in [start_date, end_date] iff lower <= dt < upper.
    """
    lower = datetime.combine(start_date, time.min)
    upper = datetime.combine(end_date + timedelta(days=1), time.min)
    return lower, upper

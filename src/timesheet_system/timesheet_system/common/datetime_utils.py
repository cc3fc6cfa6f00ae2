"""Civil-time helpers for the fixed New York zone.

Every date bucket in the system (daily totals, rollover boundaries, report
ranges) is a New York calendar date. Instants are always timezone-aware UTC
``datetime`` objects; naive values read back from MySQL are UTC as well.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..core.constants import TIMEZONE_NAME

NY_TZ = ZoneInfo(TIMEZONE_NAME)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_ny(instant: datetime) -> datetime:
    return as_utc(instant).astimezone(NY_TZ)


def civil_date_of(instant: datetime) -> date:
    """New York calendar date of an absolute instant."""
    return to_ny(instant).date()


def utc_offset_minutes_for(civil_date: date) -> int:
    """Minutes to add to New York wall time to get UTC on ``civil_date``.

    The offset is probed at local noon so the DST switch (02:00 local) never
    decides which side of the transition a date belongs to: 300 in winter,
    240 in summer.
    """
    probe = datetime(civil_date.year, civil_date.month, civil_date.day, 12, tzinfo=NY_TZ)
    offset = probe.utcoffset() or timedelta(0)
    return -int(offset.total_seconds() // 60)


def ny_local_to_instant(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """UTC instant of a New York wall-clock time.

    ``day`` may fall outside the month (``0``, ``-6``, ``32``); it is normalised
    with calendar arithmetic first, so ``day - n`` style callers roll over
    month and year boundaries correctly.
    """
    civil = add_days(date(year, month, 1), day - 1)
    wall = datetime(civil.year, civil.month, civil.day, hour, minute, second, tzinfo=timezone.utc)
    return wall + timedelta(minutes=utc_offset_minutes_for(civil))


def civil_date_key(value: date) -> str:
    """Canonical ``YYYY-MM-DD`` grouping key; sorts chronologically as a string."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def start_of_civil_day(value: date) -> datetime:
    """Boundary instant: local midnight opening ``value``."""
    return ny_local_to_instant(value.year, value.month, value.day)


def end_of_civil_day(value: date) -> datetime:
    return ny_local_to_instant(value.year, value.month, value.day, 23, 59, 59)


def iter_civil_dates(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current = add_days(current, 1)


def format_ny_date_display(value: date) -> str:
    return value.strftime("%m/%d/%Y")


def format_ny_time_12h(instant: datetime) -> str:
    return to_ny(instant).strftime("%I:%M %p")


def format_ny_datetime(instant: datetime) -> str:
    return to_ny(instant).strftime("%Y-%m-%d %H:%M:%S")

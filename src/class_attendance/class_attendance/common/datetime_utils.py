from __future__ import annotations

from datetime import date, datetime, time

import pytz

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (seconds tolerated) into time."""
    v = str(value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")


def institution_tz(offset_minutes: int):
    return pytz.FixedOffset(int(offset_minutes))


def to_instant(on: date, at: time, offset_minutes: int) -> datetime:
    """Absolute (UTC) instant of a local date+time in the institution's fixed offset."""
    local = institution_tz(offset_minutes).localize(datetime.combine(on, at))
    return local.astimezone(pytz.utc)


def as_instant(value: datetime, offset_minutes: int) -> datetime:
    """Aware UTC datetime; naive values are read as institution-local time."""
    if value.tzinfo is None:
        value = institution_tz(offset_minutes).localize(value)
    return value.astimezone(pytz.utc)


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(pytz.utc)


def local_today(offset_minutes: int, *, now: datetime | None = None) -> date:
    now = as_instant(now or now_utc(), offset_minutes)
    return now.astimezone(institution_tz(offset_minutes)).date()


def fmt_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def fmt_time(value: time) -> str:
    return value.strftime("%H:%M")

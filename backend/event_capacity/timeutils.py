"""UTC normalisation and local formatting for event times."""
from datetime import datetime, timezone
from typing import Optional

import pytz

from event_capacity.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values (SQLite) are taken as UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def format_local(value: datetime, tz_name: Optional[str] = None) -> str:
    """Render an event time in the reporting timezone, e.g. ``2026-10-19 18:00 (Europe/Paris)``."""
    tz_name = tz_name or settings.REPORTING_TIMEZONE
    tz = pytz.timezone(tz_name)
    return f"{as_utc(value).astimezone(tz).strftime('%Y-%m-%d %H:%M')} ({tz_name})"

"""Timestamp parsing and display formatting for event dates.

Every comparison in the pipeline works on timezone-aware ``datetime``
objects produced by :func:`parse_timestamp`.  The human-readable strings
built by :func:`format_display_date` / :func:`format_display_time` are for
display only and are always derived from a parsed instant.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from dateutil import parser as date_parser
from dateutil import tz

DATE_TBA = "Date TBA"
TIME_TBA = "Time TBA"


def parse_timestamp(value: object, *, now: datetime | None = None) -> datetime | None:
    """Parse a raw provider date value into an aware UTC ``datetime``.

    Accepts ``datetime``/``date`` objects, epoch numbers (seconds, or
    milliseconds when implausibly large), ISO-8601 strings and loose
    human-readable strings such as ``"Fri, Oct 24, 8:00 PM"``.  Naive
    values are taken as UTC.  Returns ``None`` when nothing usable is found.

    Parameters
    ----------
    value:
        The raw field value.
    now:
        Reference instant supplying missing components (e.g. the year) for
        partial human-readable dates.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        seconds = float(value)
        if seconds > 1e11:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    try:
        return _as_utc(date_parser.isoparse(text))
    except (ValueError, OverflowError):
        pass

    reference = now or datetime.now(tz=timezone.utc)
    default = reference.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
    try:
        return _as_utc(date_parser.parse(text, default=default, fuzzy=True))
    except (ValueError, OverflowError):
        return None


def to_iso(moment: datetime) -> str:
    """Serialize an aware datetime as ISO-8601 with a ``Z`` suffix for UTC."""
    iso = _as_utc(moment).isoformat()
    return iso.replace("+00:00", "Z")


def start_of_day(moment: datetime) -> datetime:
    """Midnight (UTC) of the day containing *moment*."""
    moment = _as_utc(moment)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def format_display_date(moment: datetime | None, tz_name: str | None = None) -> str:
    """Render e.g. ``"Friday, October 24, 2025"``."""
    if moment is None:
        return DATE_TBA
    local = _localize(moment, tz_name)
    return f"{local.strftime('%A, %B')} {local.day}, {local.year}"


def format_display_time(moment: datetime | None, tz_name: str | None = None) -> str:
    """Render e.g. ``"8:00 PM"``."""
    if moment is None:
        return TIME_TBA
    local = _localize(moment, tz_name)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _localize(moment: datetime, tz_name: str | None) -> datetime:
    if not tz_name:
        return moment
    zone = tz.gettz(tz_name)
    if zone is None:
        return moment
    return moment.astimezone(zone)

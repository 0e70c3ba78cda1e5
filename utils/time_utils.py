import re
from datetime import datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r'^([+-])(\d{2}):(\d{2})$')
_HHMM_RE = re.compile(r'^(\d{1,2}):(\d{2})$')


def utcnow() -> datetime:
    """Returns the current time in UTC, timezone aware."""
    return datetime.now(timezone.utc)


def parse_timezone(value: str) -> tzinfo:
    """
    Parses either a fixed offset ("+05:30", "-04:00") or an IANA zone name
    ("Asia/Kolkata"). Raises ValueError for anything else.
    """
    value = value.strip()
    match = _OFFSET_RE.match(value)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        if delta >= timedelta(hours=24):
            raise ValueError(f"UTC offset out of range: {value}")
        if sign == "-":
            delta = -delta
        return timezone(delta, f"UTC{value}")
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {value}") from e


def parse_hhmm(value: str) -> time:
    """Parses "HH:MM" into a time of day."""
    match = _HHMM_RE.match(value.strip())
    if not match:
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time of day out of range: {value}")
    return time(hour, minute)

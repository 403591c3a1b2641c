"""RFC 3339 timestamps for signature expiry headers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from reqsign.signing.errors import MalformedExpiryError

_RFC3339_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_rfc3339(value: datetime) -> str:
    """
    Format an instant as an RFC 3339 UTC timestamp with second precision.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    Fractional seconds beyond microseconds are truncated.

    Raises:
        MalformedExpiryError: If the value is not RFC 3339
    """
    match = _RFC3339_RE.match(value)
    if match is None:
        raise MalformedExpiryError(value)

    offset = match.group("offset")
    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise MalformedExpiryError(value)
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    fraction = match.group("fraction") or "0"
    try:
        return datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            int(fraction[:6].ljust(6, "0")),
            tzinfo=tz,
        )
    except ValueError as exc:
        raise MalformedExpiryError(value) from exc

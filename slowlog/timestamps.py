"""Parsing for the value of a slow log ``# Time:`` header.

Two layouts are written by MySQL:

  * legacy (5.1 - 5.6): ``080606 15:22:26`` or ``080606  9:22:26``
  * ISO-like (5.7+):    ``2018-06-06T15:22:26.123456Z``

Anything after a ``#`` is a trailing comment some hosted builds append and is
dropped. Two-digit years are moved into the 2000s.

Every value is returned as naive UTC. Values without an offset (all legacy
headers, and ISO headers written with log_timestamps=SYSTEM on older builds)
are read as host local time first, so a log that switches layouts after an
upgrade still orders correctly against a stored watermark.
"""

import re
from datetime import datetime, timedelta, timezone

from slowlog.errors import MalformedTimestampError

_LEGACY_RE = re.compile(
    r"^(?P<year>\d{2})(?P<month>\d{2})(?P<day>\d{2})\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})$"
)

_ISO_RE = re.compile(
    r"^(?P<year>\d{2}|\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})"
    r"(?:[T ](?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d{1,6}))?)?"
    r"\s*(?P<zone>Z|[+-]\d{2}:?\d{2})?$"
)


def _normalize_year(year: int) -> int:
    return year + 2000 if year < 100 else year


def _parse_zone(zone: str) -> timezone:
    if zone == "Z":
        return timezone.utc
    sign = -1 if zone[0] == "-" else 1
    digits = zone[1:].replace(":", "")
    offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * offset)


def parse_time_header(value: str) -> datetime:
    """Parse the text following ``# Time:`` into a naive UTC datetime.

    Raises:
        MalformedTimestampError: if the value matches neither layout or names
            an impossible date.
    """
    text = value.split("#", 1)[0].strip()

    m = _LEGACY_RE.match(text) or _ISO_RE.match(text)
    if not m:
        raise MalformedTimestampError(value.strip())

    parts = m.groupdict()
    fraction = parts.get("fraction") or ""
    try:
        parsed = datetime(
            _normalize_year(int(parts["year"])),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            int(fraction.ljust(6, "0")) if fraction else 0,
        )
    except ValueError:
        raise MalformedTimestampError(value.strip()) from None

    zone = parts.get("zone")
    if zone:
        parsed = parsed.replace(tzinfo=_parse_zone(zone))
    return to_naive_utc(parsed)


def to_naive_utc(value: datetime) -> datetime:
    """Convert *value* to naive UTC. Naive input is taken as host local time."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)

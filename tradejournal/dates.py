"""Date helpers shared by the normalizer, validator and ledger.

Every datetime the journal stores is timezone-aware UTC. Naive values are
taken to already be UTC.
"""

from datetime import date, datetime, time, timezone
from typing import Optional, Union

# Broker export layouts tried after ISO-8601.
DATE_FORMATS = [
    "%Y-%m-%d %I:%M:%S %p",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%y %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y%m%d;%H%M%S",
    "%Y%m%d",
]


def to_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso(text: str) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed), or return None."""
    text = text.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def parse_timestamp(text: str) -> Optional[datetime]:
    """Parse an ISO-8601 or common broker timestamp, or return None."""
    parsed = parse_iso(text)
    if parsed is not None:
        return parsed
    text = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return to_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def coerce_datetime(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Coerce a boundary value (string, date or datetime) to aware UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        return parse_timestamp(value)
    return None


def parse_range_bound(text: Optional[str], end: bool = False) -> Optional[datetime]:
    """Parse a query-string range bound.

    A bare date (``2024-12-15``) used as an end bound covers the whole day.

    Raises:
        ValueError: If text is not a valid ISO-8601 date or datetime.
    """
    if text is None or not text.strip():
        return None
    text = text.strip()
    if end and len(text) == 10:
        try:
            day = date.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid date format: {text}")
        return datetime.combine(day, time.max, tzinfo=timezone.utc)
    parsed = parse_iso(text)
    if parsed is None:
        raise ValueError(f"Invalid date format: {text}")
    return parsed


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Format a stored datetime for the boundary (``...Z``)."""
    if value is None:
        return None
    return to_utc(value).isoformat().replace("+00:00", "Z")

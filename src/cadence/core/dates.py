"""Pure naive-instant codec - no I/O dependencies."""

from datetime import datetime, timedelta

EPOCH = datetime(1970, 1, 1)

_ONE_MS = timedelta(milliseconds=1)


def truncate_ms(instant: datetime) -> datetime:
    """Drop sub-millisecond precision."""
    return instant.replace(microsecond=instant.microsecond // 1000 * 1000)


def epoch_ms(instant: datetime) -> int:
    """Milliseconds since 1970-01-01T00:00 under wall-clock interpretation."""
    return (instant - EPOCH) // _ONE_MS


def parse_date(text: str) -> datetime | None:
    """
    Parse a zone-less ISO-8601 date or date-time.

    A bare date means local midnight. Strings with a UTC offset are rejected
    since instants carry no zone. Returns None for invalid text.
    """
    try:
        instant = datetime.fromisoformat(text)
    except ValueError:
        return None
    if instant.tzinfo is not None:
        return None
    return truncate_ms(instant)


def serialize_date(instant: datetime) -> str:
    """Format as YYYY-MM-DDTHH:MM:SS.fff with no zone suffix."""
    return instant.isoformat(timespec="milliseconds")

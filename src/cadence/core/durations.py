"""Pure calendar duration logic - no I/O dependencies."""

import re
from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from dateutil.relativedelta import relativedelta

from .dates import EPOCH

# Canonical text for a duration with no effect
ZERO_DURATION = "PT0S"

_DURATION_PATTERN = re.compile(
    r"P"
    r"(?:([+-]?[0-9]+)Y)?"
    r"(?:([+-]?[0-9]+)M)?"
    r"(?:([+-]?[0-9]+)D)?"
    r"(?:T"
    r"(?:([+-]?[0-9]+)H)?"
    r"(?:([+-]?[0-9]+)M)?"
    r"(?:([+-]?[0-9]+(?:\.[0-9]+)?)S)?"
    r")?"
)


class OutOfRangeError(ValueError):
    """Raised when date arithmetic leaves the representable calendar range."""

    pass


@dataclass(frozen=True)
class Duration:
    """
    A calendar duration.

    Years, months and days are wall-clock field increments; the remaining
    components are a flat offset. Absent components are zero.
    """

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0

    @property
    def sub_day_ms(self) -> int:
        """Hours, minutes, seconds and milliseconds as one millisecond offset."""
        return (
            ((self.hours * 60 + self.minutes) * 60 + self.seconds) * 1000
            + self.milliseconds
        )

    def fixed_length(self) -> timedelta | None:
        """Exact length when no component depends on the calendar, else None."""
        if self.years or self.months:
            return None
        try:
            return timedelta(days=self.days, milliseconds=self.sub_day_ms)
        except OverflowError as e:
            raise OutOfRangeError(f"Duration too long: {serialize_duration(self)}") from e


def _split_ms(total_ms: int) -> tuple[int, int]:
    """Split milliseconds into (seconds, milliseconds) sharing one sign."""
    sign = -1 if total_ms < 0 else 1
    seconds, ms = divmod(abs(total_ms), 1000)
    return sign * seconds, sign * ms


def parse_duration(text: str) -> Duration | None:
    """
    Parse P[nY][nM][nD][T[nH][nM][n[.fff]S]] into a Duration.

    Fractional seconds round half away from zero to the nearest millisecond
    and carry into whole seconds. Returns None for malformed text.
    """
    match = _DURATION_PATTERN.fullmatch(text)
    if match is None:
        return None

    years, months, days, hours, minutes, raw_seconds = match.groups()

    seconds, milliseconds = 0, 0
    if raw_seconds is not None:
        total_ms = (Decimal(raw_seconds) * 1000).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        seconds, milliseconds = _split_ms(int(total_ms))

    return Duration(
        years=int(years or 0),
        months=int(months or 0),
        days=int(days or 0),
        hours=int(hours or 0),
        minutes=int(minutes or 0),
        seconds=seconds,
        milliseconds=milliseconds,
    )


def serialize_duration(duration: Duration) -> str:
    """Serialize non-zero components; an all-zero duration becomes PT0S."""
    date_part = ""
    if duration.years:
        date_part += f"{duration.years}Y"
    if duration.months:
        date_part += f"{duration.months}M"
    if duration.days:
        date_part += f"{duration.days}D"

    time_part = ""
    if duration.hours:
        time_part += f"{duration.hours}H"
    if duration.minutes:
        time_part += f"{duration.minutes}M"
    total_ms = duration.seconds * 1000 + duration.milliseconds
    if total_ms:
        sign = "-" if total_ms < 0 else ""
        seconds, ms = divmod(abs(total_ms), 1000)
        if ms:
            time_part += f"{sign}{seconds}.{ms:03d}S"
        else:
            time_part += f"{sign}{seconds}S"

    if not date_part and not time_part:
        return ZERO_DURATION
    if time_part:
        return f"P{date_part}T{time_part}"
    return f"P{date_part}"


def add_duration(instant: datetime, duration: Duration) -> datetime:
    """
    Add a duration to a naive instant.

    Years, then months, then days are applied as separate calendar steps.
    A day that does not exist in the target month is clamped to the month's
    last day (Jan 31 + 1 month = Feb 28). The sub-day components follow as
    one flat offset.

    Raises OutOfRangeError when the result falls outside years 1-9999.
    """
    result = instant
    try:
        if duration.years:
            result = result + relativedelta(years=duration.years)
        if duration.months:
            result = result + relativedelta(months=duration.months)
        if duration.days:
            result = result + timedelta(days=duration.days)
        return result + timedelta(milliseconds=duration.sub_day_ms)
    except (OverflowError, ValueError) as e:
        raise OutOfRangeError(
            f"{serialize_duration(duration)} from {instant.isoformat()} is out of range"
        ) from e


def negate_duration(duration: Duration) -> Duration:
    """Component-wise negation."""
    return Duration(**{f.name: -getattr(duration, f.name) for f in fields(duration)})


def scale_duration(duration: Duration, factor: int) -> Duration:
    """Component-wise multiplication by an integer."""
    return Duration(**{f.name: factor * getattr(duration, f.name) for f in fields(duration)})


def is_zero(duration: Duration) -> bool:
    """True if adding the duration leaves the epoch unchanged."""
    try:
        return add_duration(EPOCH, duration) == EPOCH
    except OutOfRangeError:
        return False


def is_monotonic(duration: Duration) -> bool:
    """True if every non-zero component shares one sign."""
    values = [getattr(duration, f.name) for f in fields(duration)]
    signs = {v > 0 for v in values if v}
    return len(signs) <= 1

"""Pure repeat rule logic - no I/O dependencies."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import assert_never

from .dates import parse_date, serialize_date
from .durations import (
    Duration,
    OutOfRangeError,
    add_duration,
    is_monotonic,
    is_zero,
    negate_duration,
    parse_duration,
    scale_duration,
    serialize_duration,
)


class ScheduleError(ValueError):
    """Raised when a schedule period cannot step toward a target instant."""

    pass


@dataclass(frozen=True)
class Once:
    """Terminal rule - never recurs."""


@dataclass(frozen=True)
class Manual:
    """Recurs only on explicit user action."""


@dataclass(frozen=True)
class Delay:
    """Next occurrence is the reference instant shifted by a fixed delay."""

    delay: Duration


@dataclass(frozen=True)
class Schedule:
    """
    Periodic rule with offsets.

    Occurrences are base + k * period + offset for every integer k and every
    offset. Offset order only matters for breaking ties.
    """

    base: datetime
    period: Duration
    offsets: tuple[Duration, ...]

    def __post_init__(self):
        object.__setattr__(self, "offsets", tuple(self.offsets))
        if not self.offsets:
            raise ValueError("Schedule needs at least one offset")


RepeatRule = Once | Manual | Delay | Schedule


def occurrence(base: datetime, period: Duration, k: int) -> datetime:
    """
    The k-th period step from base, taken in one move.

    Month-end anchors keep their day: Jan 31 steps to Feb 28 and then to
    Mar 31, not Mar 28.
    """
    return add_duration(base, scale_duration(period, k))


def _average_length(period: Duration) -> timedelta:
    return timedelta(
        days=period.years * 365.2425 + period.months * 30.436875 + period.days,
        milliseconds=period.sub_day_ms,
    )


def _floor_index(target: datetime, base: datetime, period: Duration) -> int:
    """Largest k with occurrence(base, period, k) <= target, for a non-zero period."""
    step = period.fixed_length()
    if step is not None and step > timedelta(0):
        return (target - base) // step

    if not is_monotonic(period) or add_duration(base, period) <= base:
        raise ScheduleError(
            f"Period {serialize_duration(period)} does not advance from {serialize_date(base)}"
        )

    k = (target - base) // _average_length(period)
    while occurrence(base, period, k) > target:
        k -= 1
    while occurrence(base, period, k + 1) <= target:
        k += 1
    return k


def floor_date(target: datetime, base: datetime, period: Duration) -> datetime:
    """
    Largest base + k * period that is <= target.

    A zero period returns target unchanged. Raises ScheduleError for periods
    that mix signs or step backward.
    """
    if is_zero(period):
        return target
    return occurrence(base, period, _floor_index(target, base, period))


def _windows(origin: datetime, base: datetime, period: Duration) -> list[datetime]:
    """The period steps before, at and after the floor of origin."""
    if is_zero(period):
        return [add_duration(origin, negate_duration(period)), origin, add_duration(origin, period)]
    k = _floor_index(origin, base, period)
    return [occurrence(base, period, k + i) for i in (-1, 0, 1)]


def seek(rule: RepeatRule, origin: datetime, forward: bool) -> datetime | None:
    """
    Nearest occurrence strictly after (forward) or before origin.

    Schedules search the period windows either side of the floor of origin.
    Equidistant candidates resolve to the first found, by window then offset.
    """
    match rule:
        case Once() | Manual():
            return None
        case Delay(delay=delay):
            return add_duration(origin, delay if forward else negate_duration(delay))
        case Schedule(base=base, period=period, offsets=offsets):
            closest = None
            for window in _windows(origin, base, period):
                for offset in offsets:
                    candidate = add_duration(window, offset)
                    if forward:
                        if origin < candidate and (closest is None or candidate < closest):
                            closest = candidate
                    elif candidate < origin and (closest is None or closest < candidate):
                        closest = candidate
            return closest
        case _:
            assert_never(rule)


def rebase(rule: RepeatRule, near: datetime | None) -> RepeatRule:
    """Re-anchor a schedule to its period-aligned instant at or before near."""
    if near is None:
        return rule

    match rule:
        case Once() | Manual() | Delay():
            return rule
        case Schedule():
            return replace(rule, base=floor_date(near, rule.base, rule.period))
        case _:
            assert_never(rule)


def upcoming(rule: RepeatRule, origin: datetime, count: int) -> list[datetime]:
    """The next `count` occurrences after origin, fewer if the rule runs out."""
    dates = []
    current = origin
    while len(dates) < count:
        current = seek(rule, current, forward=True)
        if current is None:
            break
        dates.append(current)
    return dates


def parse_repeat(text: str) -> RepeatRule | None:
    """
    Parse a whitespace-separated repeat rule.

    Forms: once | manual | delay <duration> |
    schedule <date> <period> <offset> [<offset> ...]

    A schedule whose period mixes signs, steps backward or cannot step from
    its base without leaving the calendar is rejected. Returns None for
    invalid text.
    """
    match text.split():
        case ["once"]:
            return Once()
        case ["manual"]:
            return Manual()
        case ["delay", raw_delay]:
            delay = parse_duration(raw_delay)
            if delay is None:
                return None
            return Delay(delay)
        case ["schedule", raw_base, raw_period, *raw_offsets] if raw_offsets:
            base = parse_date(raw_base)
            period = parse_duration(raw_period)
            if base is None or period is None:
                return None
            try:
                if not is_zero(period) and not (
                    is_monotonic(period) and add_duration(base, period) > base
                ):
                    return None
            except OutOfRangeError:
                return None
            offsets = [parse_duration(raw) for raw in raw_offsets]
            if any(offset is None for offset in offsets):
                return None
            return Schedule(base=base, period=period, offsets=tuple(offsets))
        case _:
            return None


def serialize_repeat(rule: RepeatRule) -> str:
    """Serialize a rule to the form accepted by parse_repeat."""
    match rule:
        case Once():
            return "once"
        case Manual():
            return "manual"
        case Delay(delay=delay):
            return f"delay {serialize_duration(delay)}"
        case Schedule(base=base, period=period, offsets=offsets):
            parts = ["schedule", serialize_date(base), serialize_duration(period)]
            parts.extend(serialize_duration(offset) for offset in offsets)
            return " ".join(parts)
        case _:
            assert_never(rule)

"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, assert_never

from .dates import parse_date, serialize_date
from .repeat import Once, RepeatRule, parse_repeat, rebase, seek, serialize_repeat


class TaskState(Enum):
    """Lifecycle tag of a task."""

    PENDING = "pending"
    STARTED = "started"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Pending:
    """Not started."""


@dataclass(frozen=True)
class Started:
    """Work began at start_time."""

    start_time: datetime


@dataclass(frozen=True)
class Completed:
    """Work ran from start_time to end_time."""

    start_time: datetime
    end_time: datetime


Lifecycle = Pending | Started | Completed


@dataclass(frozen=True)
class Task:
    """A named task with an optional scheduled date and a repeat rule."""

    name: str
    scheduled_date: datetime | None = None
    repeat: RepeatRule = field(default_factory=Once)
    lifecycle: Lifecycle = field(default_factory=Pending)

    @property
    def state(self) -> TaskState:
        match self.lifecycle:
            case Pending():
                return TaskState.PENDING
            case Started():
                return TaskState.STARTED
            case Completed():
                return TaskState.COMPLETED
            case _:
                assert_never(self.lifecycle)

    @property
    def start_time(self) -> datetime | None:
        match self.lifecycle:
            case Pending():
                return None
            case Started(start_time=start) | Completed(start_time=start):
                return start
            case _:
                assert_never(self.lifecycle)

    @property
    def end_time(self) -> datetime | None:
        match self.lifecycle:
            case Completed(end_time=end):
                return end
            case _:
                return None

    def format_date(self) -> str:
        """Scheduled date as YYYY-MM-DD, or 'no date'."""
        if self.scheduled_date is None:
            return "no date"
        return self.scheduled_date.date().isoformat()


class Action(Enum):
    """User actions on a task."""

    DELETE = "delete"
    START = "start"
    CANCEL = "cancel"
    COMPLETE = "complete"
    SEEK_BACK = "seek_back"
    SEEK_FORWARD = "seek_forward"


@dataclass(frozen=True)
class CreateTask:
    """Store a new task."""

    task: Task


@dataclass(frozen=True)
class DeleteTask:
    """Remove the acted-on task."""


@dataclass(frozen=True)
class UpdateTask:
    """Replace the acted-on task."""

    task: Task


TaskEvent = CreateTask | DeleteTask | UpdateTask


def apply_action(action: Action, task: Task, now: datetime) -> list[TaskEvent]:
    """
    Turn an action on a task into the ordered events the store should apply.

    Pure function - no I/O. `now` is the only time reference.
    """
    match action:
        case Action.DELETE:
            return [DeleteTask()]
        case Action.START:
            return [UpdateTask(replace(task, lifecycle=Started(start_time=now)))]
        case Action.CANCEL:
            return [UpdateTask(replace(task, lifecycle=Pending()))]
        case Action.COMPLETE:
            return _complete(task, now)
        case Action.SEEK_BACK | Action.SEEK_FORWARD:
            return [UpdateTask(_reschedule(task, forward=action is Action.SEEK_FORWARD))]
        case _:
            assert_never(action)


def _complete(task: Task, now: datetime) -> list[TaskEvent]:
    """Close out the task and, for recurring rules, spawn its successor."""
    start = task.start_time if task.start_time is not None else now
    events: list[TaskEvent] = [
        UpdateTask(
            replace(task, repeat=Once(), lifecycle=Completed(start_time=start, end_time=now))
        )
    ]

    if not isinstance(task.repeat, Once):
        repeat = rebase(task.repeat, now)
        successor = replace(
            task,
            scheduled_date=seek(repeat, now, forward=True),
            repeat=repeat,
            lifecycle=Pending(),
        )
        events.append(CreateTask(successor))

    return events


def _reschedule(task: Task, forward: bool) -> Task:
    """Move the scheduled date to the neighbouring occurrence of its rule."""
    if task.scheduled_date is None:
        return task
    repeat = rebase(task.repeat, task.scheduled_date)
    candidate = seek(repeat, task.scheduled_date, forward)
    scheduled_date = candidate if candidate is not None else task.scheduled_date
    return replace(task, scheduled_date=scheduled_date, repeat=repeat)


# ============== Record Codec ==============


def _optional_date(value: Any) -> datetime | None:
    """Decode a nullable date field; raises ValueError when malformed."""
    if value is None:
        return None
    instant = parse_date(value)
    if instant is None:
        raise ValueError(f"Invalid date: {value!r}")
    return instant


def _format_optional(instant: datetime | None) -> str | None:
    return serialize_date(instant) if instant is not None else None


def task_to_dict(task: Task) -> dict:
    """Serialize a task to a JSON-compatible record."""
    return {
        "name": task.name,
        "scheduled_date": _format_optional(task.scheduled_date),
        "repeat": serialize_repeat(task.repeat),
        "state": task.state.value,
        "start_time": _format_optional(task.start_time),
        "end_time": _format_optional(task.end_time),
    }


def task_from_dict(data: dict) -> Task | None:
    """Decode a task record. Returns None if any field is malformed."""
    try:
        name = data["name"]
        if not isinstance(name, str):
            return None
        scheduled_date = _optional_date(data.get("scheduled_date"))
        repeat = parse_repeat(data.get("repeat", "once"))
        if repeat is None:
            return None
        start = _optional_date(data.get("start_time"))
        end = _optional_date(data.get("end_time"))
    except (AttributeError, KeyError, TypeError, ValueError):
        return None

    match (data.get("state", "pending"), start, end):
        case ("pending", None, None):
            lifecycle = Pending()
        case ("started", datetime(), None):
            lifecycle = Started(start_time=start)
        case ("completed", datetime(), datetime()):
            lifecycle = Completed(start_time=start, end_time=end)
        case _:
            return None

    return Task(name=name, scheduled_date=scheduled_date, repeat=repeat, lifecycle=lifecycle)

"""Functional core - pure scheduling logic with no I/O."""

from .dates import parse_date, serialize_date
from .durations import (
    Duration,
    OutOfRangeError,
    add_duration,
    is_zero,
    negate_duration,
    parse_duration,
    scale_duration,
    serialize_duration,
)
from .repeat import (
    Delay,
    Manual,
    Once,
    RepeatRule,
    Schedule,
    ScheduleError,
    floor_date,
    occurrence,
    parse_repeat,
    rebase,
    seek,
    serialize_repeat,
)
from .tasks import (
    Action,
    Completed,
    CreateTask,
    DeleteTask,
    Pending,
    Started,
    Task,
    TaskEvent,
    TaskState,
    UpdateTask,
    apply_action,
)

__all__ = [
    # Dates
    "parse_date",
    "serialize_date",
    # Durations
    "Duration",
    "OutOfRangeError",
    "add_duration",
    "is_zero",
    "negate_duration",
    "parse_duration",
    "scale_duration",
    "serialize_duration",
    # Repeat rules
    "Delay",
    "Manual",
    "Once",
    "RepeatRule",
    "Schedule",
    "ScheduleError",
    "floor_date",
    "occurrence",
    "parse_repeat",
    "rebase",
    "seek",
    "serialize_repeat",
    # Tasks
    "Action",
    "Completed",
    "CreateTask",
    "DeleteTask",
    "Pending",
    "Started",
    "Task",
    "TaskEvent",
    "TaskState",
    "UpdateTask",
    "apply_action",
]

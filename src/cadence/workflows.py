"""Shared workflow layer between the CLI and the task store.

Each function validates its input, runs the pure core, and commits the
resulting events to a TaskStore.
"""

import logging
from datetime import datetime
from typing import assert_never

from .adapters.file_store import FileTaskStore, TaskNotFoundError
from .config import Config
from .core.dates import parse_date
from .core.repeat import parse_repeat
from .core.tasks import (
    Action,
    CreateTask,
    DeleteTask,
    Task,
    TaskEvent,
    TaskState,
    UpdateTask,
    apply_action,
)
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


class InvalidFieldError(ValueError):
    """Raised when a user-entered task field does not parse."""

    def __init__(self, field_name: str, value: str):
        super().__init__(f"Invalid {field_name}: {value!r}")
        self.field_name = field_name
        self.value = value


def get_store(config: Config) -> FileTaskStore:
    """Resolve the task store from config."""
    return FileTaskStore(config.tasks_file)


def resolve_task_id(store: TaskStore, prefix: str) -> str:
    """Expand a unique id prefix to a full task id."""
    task_ids = list(store.list_tasks())
    if prefix in task_ids:
        return prefix
    matches = [task_id for task_id in task_ids if task_id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise TaskNotFoundError(f"No task with id {prefix}")
    raise TaskNotFoundError(f"Ambiguous task id {prefix}: {', '.join(sorted(matches))}")


def create_task(
    store: TaskStore,
    name: str,
    scheduled_date: str | None = None,
    repeat: str = "once",
) -> str:
    """Validate editor fields and store a new pending task. Returns its id."""
    name = name.strip()
    if not name:
        raise InvalidFieldError("name", name)

    date = None
    if scheduled_date:
        date = parse_date(scheduled_date)
        if date is None:
            raise InvalidFieldError("date", scheduled_date)

    rule = parse_repeat(repeat)
    if rule is None:
        raise InvalidFieldError("repeat", repeat)

    task_id = store.add(Task(name=name, scheduled_date=date, repeat=rule))
    logger.info(f"Created task {task_id}: {name}")
    return task_id


def commit_events(store: TaskStore, task_id: str, events: list[TaskEvent]) -> list[str]:
    """Apply events in order to the store. Returns ids of created tasks."""
    created = []
    for event in events:
        match event:
            case UpdateTask(task=task):
                store.put(task_id, task)
            case DeleteTask():
                store.remove(task_id)
            case CreateTask(task=task):
                created.append(store.add(task))
            case _:
                assert_never(event)
    return created


def perform_action(
    store: TaskStore,
    task_id: str,
    action: Action,
    now: datetime,
) -> list[str]:
    """Run an action on a stored task and commit the outcome."""
    task = store.get(task_id)
    if task is None:
        raise TaskNotFoundError(f"No task with id {task_id}")

    events = apply_action(action, task, now)
    logger.info(f"{action.value} on task {task_id}: {len(events)} event(s)")
    return commit_events(store, task_id, events)


def agenda(store: TaskStore, include_completed: bool = False) -> list[tuple[str, Task]]:
    """Tasks ordered by scheduled date (undated last), then name."""
    tasks = [
        (task_id, task)
        for task_id, task in store.list_tasks().items()
        if include_completed or task.state is not TaskState.COMPLETED
    ]

    def sort_key(item: tuple[str, Task]) -> tuple[bool, datetime, str]:
        task = item[1]
        # Undated tasks sort after everything else
        return (task.scheduled_date is None, task.scheduled_date or datetime.min, task.name)

    return sorted(tasks, key=sort_key)

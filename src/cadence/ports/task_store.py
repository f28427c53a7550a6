"""Task store interface."""

from typing import Protocol

from cadence.core.tasks import Task


class TaskStore(Protocol):
    """Interface for keeping tasks in any backend, keyed by task id."""

    def list_tasks(self) -> dict[str, Task]:
        """All tasks by id."""
        ...

    def get(self, task_id: str) -> Task | None:
        """Fetch one task. Returns None if not found."""
        ...

    def add(self, task: Task) -> str:
        """Store a new task and return its id."""
        ...

    def put(self, task_id: str, task: Task) -> None:
        """Replace an existing task."""
        ...

    def remove(self, task_id: str) -> None:
        """Delete an existing task."""
        ...

"""File-based task storage adapter."""

import json
import logging
import uuid
from pathlib import Path

from cadence.core.tasks import Task, task_from_dict, task_to_dict

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when a task id is not in the store."""

    pass


class FileTaskStore:
    """
    JSON file task storage.

    Implements TaskStore protocol. The whole collection is one document,
    rewritten on every change. Records that fail to decode are skipped when
    listing but kept on disk untouched.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _load_records(self) -> dict[str, dict]:
        """Raw records by id. A missing or unreadable file is empty."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read task file {self.path}: {e}")
            return {}

        records = data.get("tasks") if isinstance(data, dict) else None
        if not isinstance(records, dict):
            logger.warning(f"Task file {self.path} has no 'tasks' mapping")
            return {}
        return records

    def _save_records(self, records: dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"tasks": records}, indent=2))

    def _new_id(self, records: dict[str, dict]) -> str:
        while True:
            task_id = uuid.uuid4().hex[:8]
            if task_id not in records:
                return task_id

    def list_tasks(self) -> dict[str, Task]:
        """All decodable tasks by id."""
        tasks = {}
        for task_id, record in self._load_records().items():
            task = task_from_dict(record) if isinstance(record, dict) else None
            if task is None:
                logger.warning(f"Skipping malformed task {task_id} in {self.path}")
                continue
            tasks[task_id] = task
        return tasks

    def get(self, task_id: str) -> Task | None:
        """Fetch one task. Returns None if not found or malformed."""
        record = self._load_records().get(task_id)
        if not isinstance(record, dict):
            return None
        return task_from_dict(record)

    def add(self, task: Task) -> str:
        """Store a new task under a fresh random id."""
        records = self._load_records()
        task_id = self._new_id(records)
        records[task_id] = task_to_dict(task)
        self._save_records(records)
        logger.debug(f"Added task {task_id}: {task.name}")
        return task_id

    def put(self, task_id: str, task: Task) -> None:
        """Replace an existing task."""
        records = self._load_records()
        if task_id not in records:
            raise TaskNotFoundError(f"No task with id {task_id}")
        records[task_id] = task_to_dict(task)
        self._save_records(records)
        logger.debug(f"Updated task {task_id}: {task.name}")

    def remove(self, task_id: str) -> None:
        """Delete an existing task."""
        records = self._load_records()
        if task_id not in records:
            raise TaskNotFoundError(f"No task with id {task_id}")
        del records[task_id]
        self._save_records(records)
        logger.debug(f"Removed task {task_id}")

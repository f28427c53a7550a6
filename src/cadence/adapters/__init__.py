"""Adapters - I/O implementations of ports."""

from .file_store import FileTaskStore, TaskNotFoundError

__all__ = [
    "FileTaskStore",
    "TaskNotFoundError",
]

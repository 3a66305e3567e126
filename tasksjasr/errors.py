"""Exceptions raised by the task registry."""

from __future__ import annotations


class TaskRegistryError(Exception):
    """Base class for task registry errors."""


class TaskNotFound(TaskRegistryError):
    """An operation referenced a task ID that does not exist."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Tarea con ID {task_id} no encontrada")


class HandlerFailure(TaskRegistryError):
    """A strategy handler could not complete its side effect.

    ``kind`` classifies the cause: ``timeout``, ``exit``, ``not_found``,
    ``filesystem``, ``outside_workdir`` or ``error``.
    """

    def __init__(self, message: str, kind: str = "error"):
        self.kind = kind
        super().__init__(message)


class PersistenceFailure(TaskRegistryError):
    """The backing tasks file could not be read or written."""

"""TasksJASR - persistent task registry with keyword-driven execution."""

from .config import Settings
from .errors import HandlerFailure, PersistenceFailure, TaskNotFound, TaskRegistryError
from .executor import TaskExecutor
from .manager import TaskManager
from .models import (
    DuplicateWarning,
    ExecutionInstructions,
    ExecutionResult,
    ExecutionStats,
    RemovalSummary,
    Task,
    TaskRunOutcome,
    TaskStatus,
    TaskUpdate,
)
from .persistence import JsonTaskFile, TaskPersistence
from .store import TaskStore

__all__ = [
    "DuplicateWarning",
    "ExecutionInstructions",
    "ExecutionResult",
    "ExecutionStats",
    "HandlerFailure",
    "JsonTaskFile",
    "PersistenceFailure",
    "RemovalSummary",
    "Settings",
    "Task",
    "TaskExecutor",
    "TaskManager",
    "TaskNotFound",
    "TaskPersistence",
    "TaskRegistryError",
    "TaskRunOutcome",
    "TaskStatus",
    "TaskStore",
    "TaskUpdate",
]

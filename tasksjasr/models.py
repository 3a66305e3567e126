"""Data models for the TasksJASR task registry.

This module contains the records persisted in the tasks file and the
structured results returned by the lifecycle operations. Persisted records
serialize with camelCase keys so the JSON document keeps its established
shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


TASK_ID_PATTERN = re.compile(r"task-(\d+)$")


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def task_number(task_id: str) -> int:
    """Numeric suffix of a ``task-<n>`` identifier, 0 when it has none."""
    match = TASK_ID_PATTERN.search(task_id or "")
    return int(match.group(1)) if match else 0


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, raw: str) -> "TaskStatus":
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(status.value for status in cls)
            raise ValueError(f"Invalid status '{raw}'. Expected one of: {allowed}") from None

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class _Unset:
    """Marker for fields absent from a partial update."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(slots=True)
class ExecutionResult:
    """Outcome of the most recent execution attempt of a task."""

    success: bool
    executed_at: str = field(default_factory=utc_timestamp)
    result: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {"success": self.success}
        if self.result is not None:
            data["result"] = self.result
        if self.error is not None:
            data["error"] = self.error
        if self.error_kind is not None:
            data["errorKind"] = self.error_kind
        data["executedAt"] = self.executed_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionResult":
        """Create from dictionary representation."""
        return cls(
            success=bool(data["success"]),
            executed_at=data.get("executedAt", ""),
            result=data.get("result"),
            error=data.get("error"),
            error_kind=data.get("errorKind"),
        )


@dataclass(slots=True)
class ExecutionInstructions:
    """Advisory steps for an agent, computed once when the task is created."""

    task_id: str
    action_type: str
    working_directory: str
    specific_instructions: List[str] = field(default_factory=list)
    suggested_tools: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "taskId": self.task_id,
            "actionType": self.action_type,
            "specificInstructions": list(self.specific_instructions),
            "suggestedTools": list(self.suggested_tools),
            "workingDirectory": self.working_directory,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionInstructions":
        """Create from dictionary representation."""
        return cls(
            task_id=data.get("taskId", ""),
            action_type=data.get("actionType", "generic_task"),
            working_directory=data.get("workingDirectory", ""),
            specific_instructions=list(data.get("specificInstructions", [])),
            suggested_tools=list(data.get("suggestedTools", [])),
        )


@dataclass(slots=True)
class Task:
    """One unit of work held by the task store."""

    id: str
    title: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    created_at: str = field(default_factory=utc_timestamp)
    completed_at: Optional[str] = None
    failed_at: Optional[str] = None
    execution_result: Optional[ExecutionResult] = None
    execution_instructions: Optional[ExecutionInstructions] = None

    @property
    def number(self) -> int:
        return task_number(self.id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary representation."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "createdAt": self.created_at,
        }
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        if self.failed_at is not None:
            data["failedAt"] = self.failed_at
        if self.execution_result is not None:
            data["executionResult"] = self.execution_result.to_dict()
        if self.execution_instructions is not None:
            data["executionInstructions"] = self.execution_instructions.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Create from the persisted dictionary representation."""
        result = data.get("executionResult")
        instructions = data.get("executionInstructions")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            status=TaskStatus.parse(data.get("status", TaskStatus.PENDING.value)),
            created_at=data.get("createdAt", ""),
            completed_at=data.get("completedAt"),
            failed_at=data.get("failedAt"),
            execution_result=ExecutionResult.from_dict(result) if result else None,
            execution_instructions=ExecutionInstructions.from_dict(instructions) if instructions else None,
        )


# Persisted key -> Task attribute
TASK_FIELDS: Dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "status": "status",
    "createdAt": "created_at",
    "completedAt": "completed_at",
    "failedAt": "failed_at",
    "executionResult": "execution_result",
    "executionInstructions": "execution_instructions",
}


@dataclass(slots=True)
class TaskUpdate:
    """Partial update of a task; fields left as UNSET are not touched.

    Setting a field to ``None`` clears it.
    """

    title: Any = UNSET
    description: Any = UNSET
    status: Any = UNSET
    completed_at: Any = UNSET
    failed_at: Any = UNSET
    execution_result: Any = UNSET
    execution_instructions: Any = UNSET

    def present_fields(self) -> Dict[str, Any]:
        """Attribute name -> value for every field that was supplied."""
        present = {}
        for name in self.__slots__:
            value = getattr(self, name)
            if value is not UNSET:
                present[name] = value
        return present

    def apply_to(self, task: Task) -> None:
        """Shallow-merge the supplied fields into ``task``."""
        for name, value in self.present_fields().items():
            if name == "status":
                value = TaskStatus.parse(value)
            setattr(task, name, value)

    @classmethod
    def from_dict(cls, updates: Dict[str, Any]) -> "TaskUpdate":
        """Build an update from persisted-style keys, as sent by a client."""
        update = cls()
        for key, value in updates.items():
            attribute = TASK_FIELDS.get(key)
            if attribute is None or attribute in ("id", "created_at"):
                raise ValueError(f"Field '{key}' cannot be updated")
            if attribute == "status":
                value = TaskStatus.parse(value)
            else:
                _check_type(key, value, _UPDATE_TYPES[attribute])
                if attribute == "execution_result" and value is not None:
                    value = _nested_record(key, ExecutionResult, value)
                elif attribute == "execution_instructions" and value is not None:
                    value = _nested_record(key, ExecutionInstructions, value)
            setattr(update, attribute, value)
        return update


_UPDATE_TYPES: Dict[str, tuple] = {
    "title": (str,),
    "description": (str,),
    "completed_at": (str, type(None)),
    "failed_at": (str, type(None)),
    "execution_result": (dict, type(None)),
    "execution_instructions": (dict, type(None)),
}


def _check_type(key: str, value: Any, allowed: tuple) -> None:
    if not isinstance(value, allowed):
        expected = " or ".join("null" if kind is type(None) else kind.__name__ for kind in allowed)
        raise ValueError(f"Field '{key}' must be {expected}, got {type(value).__name__}")


def _nested_record(key: str, record_type: Any, value: Dict[str, Any]) -> Any:
    try:
        return record_type.from_dict(value)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Field '{key}' is malformed: {e}") from e


@dataclass(slots=True)
class DuplicateWarning:
    """Returned instead of a new task when a near-duplicate already exists."""

    existing_task: Task
    message: str

    is_duplicate: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "isDuplicate": self.is_duplicate,
            "existingTask": self.existing_task.to_dict(),
            "message": self.message,
        }


@dataclass(slots=True)
class RemovalSummary:
    """Counts reported after collapsing duplicate tasks."""

    removed_count: int
    remaining_tasks: int

    def to_dict(self) -> Dict[str, int]:
        return {"removedCount": self.removed_count, "remainingTasks": self.remaining_tasks}


@dataclass(slots=True)
class ExecutionStats:
    """Task counts per status."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "pending": self.pending,
            "inProgress": self.in_progress,
            "completed": self.completed,
            "failed": self.failed,
        }

    def get_completion_rate(self) -> float:
        """Completed tasks as a percentage of all tasks."""
        if self.total == 0:
            return 0.0
        return (self.completed / self.total) * 100


@dataclass(slots=True)
class TaskRunOutcome:
    """Per-task entry of a batch execution."""

    task_id: str
    success: bool
    result: Optional[ExecutionResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"taskId": self.task_id, "success": self.success}
        if self.result is not None:
            data["result"] = self.result.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class ThoughtTaskDraft:
    """A task proposal derived from one sequential-thinking thought.

    ``priority`` and ``dependencies`` are reported back to the caller but
    are not stored on the resulting task.
    """

    title: str
    description: str
    priority: str = "normal"
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "dependencies": list(self.dependencies),
        }

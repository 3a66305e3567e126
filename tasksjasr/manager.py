"""Task lifecycle management for TasksJASR.

``TaskManager`` ties the pieces together: duplicate detection and
instruction generation on creation, status transitions around handler
execution, and the reporting helpers exposed by the MCP server.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import Settings
from .duplicates import find_similar_task
from .errors import HandlerFailure, TaskNotFound
from .executor import TaskExecutor
from .instructions import generate_execution_instructions
from .models import (
    DuplicateWarning,
    ExecutionResult,
    ExecutionStats,
    RemovalSummary,
    Task,
    TaskRunOutcome,
    TaskStatus,
    TaskUpdate,
    ThoughtTaskDraft,
    UNSET,
    utc_timestamp,
)
from .persistence import JsonTaskFile
from .store import TaskStore
from .tasksjasr_logging import (
    log_error_with_context,
    log_operation,
    log_performance,
    log_task_event,
)


logger = logging.getLogger("tasksjasr.manager")

ALREADY_COMPLETED_MESSAGE = "Tarea ya completada"


class TaskManager:
    """Owns the task lifecycle for one working directory."""

    def __init__(
        self,
        store: TaskStore,
        working_directory: Path | str,
        *,
        executor: Optional[TaskExecutor] = None,
        auto_execute: bool = True,
    ):
        self.store = store
        self.working_directory = Path(working_directory).resolve()
        self.executor = executor or TaskExecutor(self.working_directory)
        # Reported to clients only; no code path consults it.
        self.auto_execute = auto_execute

    @classmethod
    def from_settings(cls, settings: Settings) -> "TaskManager":
        """Build a manager backed by the JSON tasks file named in ``settings``."""
        store = TaskStore(JsonTaskFile(settings.tasks_file))
        logger.info(f"Task manager using {settings.tasks_file} in {settings.working_directory}")
        return cls(store, settings.working_directory, auto_execute=settings.auto_execute)

    # ------------------------------------------------------------------
    # Creation and CRUD
    # ------------------------------------------------------------------

    def add_task(self, title: str, description: str) -> Union[Task, DuplicateWarning]:
        """Create a pending task unless a near-duplicate already exists."""
        if not title or not title.strip():
            raise ValueError("Title cannot be empty")
        description = description or ""

        existing = find_similar_task(title, description, self.store.all())
        if existing is not None:
            log_task_event("duplicate_detected", task_id=existing.id, proposed_title=title)
            return DuplicateWarning(existing_task=existing, message=_duplicate_message(existing))

        with log_operation("add_task", title=title):
            task = Task(id=self.store.next_id(), title=title, description=description)
            task.execution_instructions = generate_execution_instructions(task, self.working_directory)
            self.store.insert(task)

        log_task_event("task_created", task_id=task.id, action_type=task.execution_instructions.action_type)
        return task

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.store.get(task_id)

    def require_task(self, task_id: str) -> Task:
        task = self.store.get(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    def update_task(self, task_id: str, updates: Union[TaskUpdate, Mapping[str, Any]]) -> Task:
        """Merge ``updates`` into a task and return it.

        A manual move to ``completed`` or ``failed`` stamps the matching
        timestamp unless the caller supplied one; a move back to ``pending``
        or ``in-progress`` clears both timestamps.
        """
        update = updates if isinstance(updates, TaskUpdate) else TaskUpdate.from_dict(dict(updates))
        task = self.require_task(task_id)

        if update.status is not UNSET and update.status != task.status:
            if update.status == TaskStatus.COMPLETED and update.completed_at is UNSET:
                update.completed_at = utc_timestamp()
                update.failed_at = None
            elif update.status == TaskStatus.FAILED and update.failed_at is UNSET:
                update.failed_at = utc_timestamp()
                update.completed_at = None
            elif not TaskStatus.parse(update.status).is_terminal:
                if update.completed_at is UNSET:
                    update.completed_at = None
                if update.failed_at is UNSET:
                    update.failed_at = None

        self.store.update(task_id, update)
        logger.info(f"Updated task {task_id}: {sorted(update.present_fields())}")
        return task

    def delete_task(self, task_id: str) -> None:
        if not self.store.delete(task_id):
            raise TaskNotFound(task_id)
        logger.info(f"Deleted task {task_id}")

    def list_tasks(self, filter: Optional[Mapping[str, Any]] = None) -> List[Task]:
        return self.store.list(filter)

    def remove_duplicate_tasks(self) -> RemovalSummary:
        summary = self.store.remove_duplicates()
        if summary.removed_count:
            log_task_event("duplicates_removed", **summary.to_dict())
        return summary

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @log_performance("execute_task")
    def execute_task(self, task_id: str) -> ExecutionResult:
        """Run a task's handler and record the outcome on the task.

        Raises ``TaskNotFound`` for unknown IDs and ``HandlerFailure`` after
        recording a failed attempt.
        """
        task = self.require_task(task_id)
        if task.status is TaskStatus.COMPLETED:
            return ExecutionResult(success=True, result=ALREADY_COMPLETED_MESSAGE)

        self.store.update(task_id, TaskUpdate(status=TaskStatus.IN_PROGRESS, completed_at=None, failed_at=None))

        try:
            result = self.executor.execute(task)
        except Exception as e:
            failure = e if isinstance(e, HandlerFailure) else HandlerFailure(str(e))
            failed_at = utc_timestamp()
            self.store.update(task_id, TaskUpdate(
                status=TaskStatus.FAILED,
                failed_at=failed_at,
                completed_at=None,
                execution_result=ExecutionResult(
                    success=False,
                    error=str(failure),
                    error_kind=failure.kind,
                    executed_at=failed_at,
                ),
            ))
            log_error_with_context(e, {"operation": "execute_task", "task_id": task_id})
            log_task_event("task_failed", task_id=task_id, error=str(failure), error_kind=failure.kind)
            if failure is e:
                raise
            raise failure from e

        self.store.update(task_id, TaskUpdate(
            status=TaskStatus.COMPLETED,
            completed_at=utc_timestamp(),
            failed_at=None,
            execution_result=result,
        ))
        log_task_event("task_completed", task_id=task_id, result=result.result)
        return result

    def execute_pending_tasks(self) -> List[TaskRunOutcome]:
        """Execute every task that is pending now; one failure never stops the batch."""
        pending = self.store.list({"status": TaskStatus.PENDING.value})
        outcomes: List[TaskRunOutcome] = []

        for task in pending:
            try:
                result = self.execute_task(task.id)
            except (HandlerFailure, TaskNotFound) as e:
                outcomes.append(TaskRunOutcome(task_id=task.id, success=False, error=str(e)))
            else:
                outcomes.append(TaskRunOutcome(task_id=task.id, success=True, result=result))

        logger.info(
            f"Executed {len(outcomes)} pending tasks, "
            f"{sum(1 for outcome in outcomes if not outcome.success)} failed"
        )
        return outcomes

    def set_auto_execute(self, enabled: bool) -> None:
        self.auto_execute = enabled
        logger.info(f"Auto-execute {'enabled' if enabled else 'disabled'}")

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_execution_stats(self) -> ExecutionStats:
        tasks = self.store.all()
        return ExecutionStats(
            total=len(tasks),
            pending=sum(1 for t in tasks if t.status is TaskStatus.PENDING),
            in_progress=sum(1 for t in tasks if t.status is TaskStatus.IN_PROGRESS),
            completed=sum(1 for t in tasks if t.status is TaskStatus.COMPLETED),
            failed=sum(1 for t in tasks if t.status is TaskStatus.FAILED),
        )

    def to_markdown(self) -> str:
        """Render all tasks as a Markdown report."""
        tasks = self.list_tasks()
        markdown = "# Lista de Tareas\n\n"

        if not tasks:
            return markdown + "No hay tareas para mostrar.\n"

        for task in tasks:
            markdown += f"## {task.title} (ID: {task.id})\n"
            markdown += f"**Descripción:** {task.description}\n"
            markdown += f"**Estado:** {task.status.value}\n"
            markdown += f"**Creada el:** {_format_timestamp(task.created_at)}\n\n"
        return markdown

    # ------------------------------------------------------------------
    # Sequential thinking import
    # ------------------------------------------------------------------

    def import_from_sequential_thinking(self, data: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Create one task per thought; returns the outcome of each creation.

        Each entry carries the created task (or the duplicate warning) plus
        the draft priority and dependencies, which are not persisted.
        """
        thoughts = data.get("thoughts") or []
        if not isinstance(thoughts, list):
            raise ValueError("sequentialThoughtData.thoughts must be a list")

        imported: List[Dict[str, Any]] = []
        for draft in convert_thoughts_to_drafts(thoughts):
            created = self.add_task(draft.title, draft.description)
            entry = created.to_dict()
            entry["priority"] = draft.priority
            entry["dependencies"] = list(draft.dependencies)
            imported.append(entry)

        logger.info(f"Imported {len(imported)} thoughts from sequential thinking")
        return imported


def convert_thoughts_to_drafts(thoughts: List[Mapping[str, Any]]) -> List[ThoughtTaskDraft]:
    """Turn sequential-thinking thoughts into task drafts, numbering steps from 1."""
    drafts = []
    for index, thought in enumerate(thoughts, start=1):
        content = str(thought.get("content", "")).strip()
        drafts.append(ThoughtTaskDraft(
            title=content,
            description=f"Paso {index}: {content}",
            priority=determine_priority(thought),
            dependencies=find_dependencies(thought),
        ))
    return drafts


def determine_priority(thought: Mapping[str, Any]) -> str:
    if thought.get("isRevision"):
        return "high"
    if thought.get("branchFromThought"):
        return "medium"
    return "normal"


def find_dependencies(thought: Mapping[str, Any]) -> List[str]:
    branch = thought.get("branchFromThought")
    if not branch:
        return []
    return [f"task-{branch}"]


def _duplicate_message(existing: Task) -> str:
    return (
        "⚠️ TAREA DUPLICADA DETECTADA\n\n"
        "Ya existe una tarea similar:\n"
        f"ID: {existing.id}\n"
        f"Título: {existing.title}\n"
        f"Estado: {existing.status.value}\n\n"
        "❓ ¿Quieres continuar creando esta tarea duplicada?\n"
        "Si es así, usa 'add_task' con un título más específico."
    )


def _format_timestamp(value: str) -> str:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S")

"""In-memory task store mirrored to an injected persistence port."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from .errors import PersistenceFailure
from .models import RemovalSummary, Task, TaskUpdate, task_number
from .persistence import TaskPersistence
from .tasksjasr_logging import log_error_with_context


logger = logging.getLogger("tasksjasr.store")


class TaskStore:
    """Ordered collection of tasks; the in-memory list is authoritative.

    Every mutation rewrites the full task set through the persistence port.
    A failed save is logged and kept in ``last_save_error`` but the
    in-memory change stands.
    """

    def __init__(self, persistence: TaskPersistence):
        self._persistence = persistence
        self.last_save_error: Optional[PersistenceFailure] = None
        try:
            self._tasks: List[Task] = list(persistence.load())
        except PersistenceFailure as e:
            log_error_with_context(e, {"operation": "load_tasks"})
            logger.warning("Starting with an empty task set")
            self._tasks = []
        self._highest_allocated = max((task.number for task in self._tasks), default=0)
        logger.info(f"TaskStore ready total={len(self._tasks)}")

    def __len__(self) -> int:
        return len(self._tasks)

    def all(self) -> List[Task]:
        """All tasks in insertion order."""
        return list(self._tasks)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def next_id(self) -> str:
        """Identifier the next inserted task should receive."""
        highest = max((task.number for task in self._tasks), default=0)
        return f"task-{max(highest, self._highest_allocated) + 1}"

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def insert(self, task: Task) -> Task:
        self._tasks.append(task)
        self._highest_allocated = max(self._highest_allocated, task.number)
        self._persist()
        return task

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def update(self, task_id: str, update: TaskUpdate) -> bool:
        """Merge the supplied fields into the task; ``False`` when it does not exist."""
        task = self.get(task_id)
        if task is None:
            return False
        update.apply_to(task)
        self._persist()
        return True

    def delete(self, task_id: str) -> bool:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                del self._tasks[index]
                self._persist()
                return True
        return False

    def list(self, filter: Optional[Mapping[str, Any]] = None) -> List[Task]:
        """Tasks whose persisted fields equal every filter value, by numeric ID."""
        criteria = dict(filter or {})
        matching = [task for task in self._tasks if _matches(task, criteria)]
        return sorted(matching, key=lambda task: task_number(task.id))

    def remove_duplicates(self) -> RemovalSummary:
        """Keep the first task per (normalized title, status) pair."""
        seen = set()
        unique: List[Task] = []
        for task in self._tasks:
            key = (task.title.lower().strip(), task.status)
            if key not in seen:
                seen.add(key)
                unique.append(task)

        removed = len(self._tasks) - len(unique)
        self._tasks = unique
        if removed:
            self._persist()
            logger.info(f"Removed {removed} duplicate tasks")
        return RemovalSummary(removed_count=removed, remaining_tasks=len(unique))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        try:
            self._persistence.save(list(self._tasks))
        except PersistenceFailure as e:
            self.last_save_error = e
            log_error_with_context(e, {"operation": "save_tasks", "task_count": len(self._tasks)})
        else:
            self.last_save_error = None


def _matches(task: Task, criteria: Dict[str, Any]) -> bool:
    if not criteria:
        return True
    record = task.to_dict()
    for key, expected in criteria.items():
        if key not in record or record[key] != expected:
            return False
    return True

"""Persistence port for the task store and its JSON file implementation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Protocol, Sequence

from .errors import PersistenceFailure
from .models import Task


logger = logging.getLogger("tasksjasr.persistence")


class TaskPersistence(Protocol):
    """Mirror of the task set outside the process."""

    def load(self) -> List[Task]:
        """Return the stored tasks, or an empty list when nothing was saved yet."""
        ...

    def save(self, tasks: Sequence[Task]) -> None:
        """Overwrite the stored tasks with ``tasks``."""
        ...


class JsonTaskFile:
    """Stores the whole task set as one pretty-printed JSON array."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> List[Task]:
        """Load tasks from file."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"Could not read tasks file {self.path}: {e}") from e

        if not isinstance(data, list):
            raise PersistenceFailure(f"Tasks file {self.path} does not contain a JSON array")

        try:
            return [Task.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceFailure(f"Malformed task record in {self.path}: {e}") from e

    def save(self, tasks: Sequence[Task]) -> None:
        """Save tasks to file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps([task.to_dict() for task in tasks], indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise PersistenceFailure(f"Could not write tasks file {self.path}: {e}") from e
        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")

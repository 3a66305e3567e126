"""Shared fixtures for the TasksJASR test suite."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import List, Sequence

import pytest

from tasksjasr.executor import TaskExecutor
from tasksjasr.manager import TaskManager
from tasksjasr.models import Task
from tasksjasr.store import TaskStore


class MemoryPersistence:
    """Persistence port that keeps deep copies in memory and counts saves."""

    def __init__(self, tasks: Sequence[Task] = ()):
        self.saved: List[Task] = [copy.deepcopy(task) for task in tasks]
        self.save_count = 0

    def load(self) -> List[Task]:
        return [copy.deepcopy(task) for task in self.saved]

    def save(self, tasks: Sequence[Task]) -> None:
        self.saved = [copy.deepcopy(task) for task in tasks]
        self.save_count += 1


@pytest.fixture
def memory_persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture
def store(memory_persistence: MemoryPersistence) -> TaskStore:
    return TaskStore(memory_persistence)


@pytest.fixture
def manager(store: TaskStore, tmp_path: Path) -> TaskManager:
    """Task manager working inside a temporary directory."""
    return TaskManager(store, tmp_path, executor=TaskExecutor(tmp_path, command_timeout=5))


@pytest.fixture
def make_store():
    """Factory for stores pre-loaded with the given tasks."""
    def factory(tasks: Sequence[Task] = ()) -> TaskStore:
        return TaskStore(MemoryPersistence(tasks))
    return factory

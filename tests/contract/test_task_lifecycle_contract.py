"""
Contract tests for the task lifecycle:
tasks are created pending with a unique task-<n> ID, move to in-progress while
their handler runs, and end completed or failed with the matching timestamp and
execution result. Every change is mirrored to the tasks file.
"""

import json

import pytest

from tasksjasr import HandlerFailure, JsonTaskFile, TaskManager, TaskStatus, TaskStore
from tasksjasr.executor import TaskExecutor


class TestTaskLifecycleContract:
    """Contract tests for task creation, execution and persistence."""

    @pytest.fixture
    def tasks_file(self, tmp_path):
        return tmp_path / "tasks.json"

    @pytest.fixture
    def lifecycle_manager(self, tmp_path, tasks_file):
        """Manager backed by a real JSON tasks file."""
        store = TaskStore(JsonTaskFile(tasks_file))
        return TaskManager(store, tmp_path, executor=TaskExecutor(tmp_path, command_timeout=5))

    def _stored(self, tasks_file):
        return {record["id"]: record for record in json.loads(tasks_file.read_text(encoding="utf-8"))}

    def test_successful_execution_records_completion(self, lifecycle_manager, tasks_file, tmp_path):
        """
        Contract Test: Verify a successful handler completes the task.

        Given: A pending task whose description asks to create a folder
        When: execute_task is called
        Then: The folder exists, the task is completed with completedAt and a
              successful executionResult, and the tasks file agrees
        """
        task = lifecycle_manager.add_task("Preparar salida", "crear carpeta salida")
        assert task.status is TaskStatus.PENDING

        lifecycle_manager.execute_task(task.id)

        assert (tmp_path / "salida").is_dir()
        record = self._stored(tasks_file)[task.id]
        assert record["status"] == "completed"
        assert "completedAt" in record
        assert "failedAt" not in record
        assert record["executionResult"]["success"] is True
        assert record["executionResult"]["result"] == "Carpeta creada: salida"

    def test_failed_execution_records_failure(self, lifecycle_manager, tasks_file):
        """
        Contract Test: Verify a failing handler leaves a failed task.

        Given: A pending task whose command exits with a non-zero status
        When: execute_task is called
        Then: HandlerFailure propagates, and the task is failed with failedAt and
              an executionResult carrying the error
        """
        task = lifecycle_manager.add_task("Romper build", 'ejecutar comando "exit 2"')

        with pytest.raises(HandlerFailure):
            lifecycle_manager.execute_task(task.id)

        record = self._stored(tasks_file)[task.id]
        assert record["status"] == "failed"
        assert "failedAt" in record
        assert "completedAt" not in record
        assert record["executionResult"]["success"] is False
        assert record["executionResult"]["errorKind"] == "exit"

    def test_ids_are_unique_and_never_reused(self, lifecycle_manager, tasks_file):
        """
        Contract Test: Verify identifiers stay unique across deletions and reloads.

        Given: Tasks task-1 and task-2, with task-2 deleted
        When: A new task is added, including after reloading from disk
        Then: Every new ID is above any ID seen before
        """
        lifecycle_manager.add_task("Generar notas", "")
        lifecycle_manager.add_task("Preparar carpeta", "")
        lifecycle_manager.delete_task("task-2")

        third = lifecycle_manager.add_task("Configurar servidor", "")
        assert third.id == "task-3"

        reloaded = TaskManager(TaskStore(JsonTaskFile(tasks_file)), tasks_file.parent)
        fourth = reloaded.add_task("Escribir documentación", "")
        assert fourth.id == "task-4"
        assert set(self._stored(tasks_file)) == {"task-1", "task-3", "task-4"}

    def test_duplicate_is_not_persisted(self, lifecycle_manager, tasks_file):
        """
        Contract Test: Verify duplicate detection prevents creation.

        Given: A task titled "Implementar backend API"
        When: add_task is called with "Implementar backend api"
        Then: A duplicate warning is returned and the tasks file still holds one task
        """
        lifecycle_manager.add_task("Implementar backend API", "")

        result = lifecycle_manager.add_task("Implementar backend api", "")

        assert result.is_duplicate is True
        assert len(self._stored(tasks_file)) == 1

    def test_completed_tasks_are_not_executed_again(self, lifecycle_manager, tmp_path):
        """
        Contract Test: Verify completed tasks short-circuit.

        Given: A completed task that created notas.txt
        When: The file is removed and execute_task is called again
        Then: The handler does not run and the file is not recreated
        """
        task = lifecycle_manager.add_task("Crear notas", "crear archivo notas.txt")
        lifecycle_manager.execute_task(task.id)
        (tmp_path / "notas.txt").unlink()

        result = lifecycle_manager.execute_task(task.id)

        assert result.success is True
        assert result.result == "Tarea ya completada"
        assert not (tmp_path / "notas.txt").exists()

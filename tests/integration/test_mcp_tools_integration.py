"""Integration tests for the MCP tool functions in main.py.

Each test points the server at a temporary working directory through
TASKSJASR_WORKING_DIR and drives the tools the way an MCP client would.
"""

import json

import pytest

import main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Fresh server state rooted at a temporary directory."""
    for name in ("TASKSJASR_FILE_PATH", "TASKSJASR_AUTO_EXECUTE", "TASKSJASR_LOG_LEVEL", "TASKSJASR_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TASKSJASR_WORKING_DIR", str(tmp_path))
    main._reset()
    yield tmp_path.resolve()
    main._reset()


class TestTaskTools:
    """Integration tests for task CRUD tools."""

    def test_add_task_persists_to_tasks_file(self, workdir):
        response = main.add_task("Crear notas", "crear archivo notas.txt")

        assert response["task"]["id"] == "task-1"
        assert response["task"]["executionInstructions"]["actionType"] == "create_file"
        assert "✅ TAREA CREADA: Crear notas (ID: task-1)" in response["message"]

        stored = json.loads((workdir / "tasks.json").read_text(encoding="utf-8"))
        assert [record["id"] for record in stored] == ["task-1"]
        assert stored[0]["status"] == "pending"

    def test_duplicate_is_reported(self, workdir):
        main.add_task("Implementar backend API", "")

        response = main.add_task("implementar backend api", "")

        assert response["isDuplicate"] is True
        assert response["existingTask"]["id"] == "task-1"
        assert main.list_tasks()["total_count"] == 1

    def test_list_tasks_with_filter(self, workdir):
        main.add_task("Generar notas", "")
        main.add_task("Preparar carpeta", "")
        main.update_task("task-1", {"status": "completed"})

        response = main.list_tasks({"status": "pending"})

        assert response["total_count"] == 1
        assert response["tasks"][0]["id"] == "task-2"
        assert response["filters_applied"] == {"status": "pending"}

    def test_update_and_delete(self, workdir):
        main.add_task("Generar notas", "")

        updated = main.update_task("task-1", {"description": "nueva"})
        deleted = main.delete_task("task-1")

        assert updated["task"]["description"] == "nueva"
        assert deleted["success"] is True
        assert main.list_tasks()["total_count"] == 0

    def test_unknown_task_errors(self, workdir):
        with pytest.raises(ValueError, match="Tarea con ID task-5 no encontrada"):
            main.update_task("task-5", {"title": "x"})
        with pytest.raises(ValueError, match="no encontrada"):
            main.delete_task("task-5")
        with pytest.raises(ValueError, match="no encontrada"):
            main.execute_task("task-5")

    def test_tasks_survive_restart(self, workdir):
        main.add_task("Generar notas", "")

        main._reset()

        assert main.list_tasks()["tasks"][0]["title"] == "Generar notas"
        assert main.add_task("Preparar carpeta", "")["task"]["id"] == "task-2"


class TestExecutionTools:
    """Integration tests for execution tools."""

    def test_execute_task(self, workdir):
        main.add_task("Crear notas", 'crear archivo notas.txt contenido: "hola"')

        response = main.execute_task("task-1")

        assert response["result"]["success"] is True
        assert (workdir / "notas.txt").read_text(encoding="utf-8") == "hola"
        assert main.list_tasks({"status": "completed"})["total_count"] == 1

    def test_execute_task_failure(self, workdir):
        main.add_task("Ajustar app", "modificar archivo app.js")

        with pytest.raises(RuntimeError, match="Error ejecutando tarea task-1"):
            main.execute_task("task-1")

        failed = main.list_tasks({"status": "failed"})["tasks"][0]
        assert failed["executionResult"]["errorKind"] == "not_found"
        assert "failedAt" in failed

    def test_execute_pending_tasks(self, workdir):
        main.add_task("Generar notas", "crear archivo notas.txt")
        main.add_task("Modificar config", "modificar archivo inexistente.js")

        response = main.execute_pending_tasks()

        assert response["count"] == 2
        assert response["failed"] == 1
        assert main.get_execution_stats() == {
            "total": 2,
            "pending": 0,
            "inProgress": 0,
            "completed": 1,
            "failed": 1,
        }


class TestDirectoryTools:
    """Integration tests for working directory and settings tools."""

    def test_get_current_directory(self, workdir):
        response = main.get_current_directory()

        assert response["workingDirectory"] == str(workdir)
        assert response["tasksFilePath"] == str(workdir / "tasks.json")
        assert response["totalTasks"] == 0
        assert response["autoExecute"] is True
        assert response["lastSaveError"] is None

    def test_set_working_directory_switches_task_file(self, workdir):
        main.add_task("Generar notas", "")
        main.toggle_auto_execute(False)
        other = workdir / "otro"
        other.mkdir()

        response = main.set_working_directory(str(other))

        assert response["workingDirectory"] == str(other)
        assert response["totalTasks"] == 0
        assert main.get_current_directory()["autoExecute"] is False
        assert main.add_task("Generar notas", "")["task"]["id"] == "task-1"
        assert (other / "tasks.json").exists()

    def test_set_missing_working_directory(self, workdir):
        with pytest.raises(ValueError, match="Directorio no encontrado"):
            main.set_working_directory(str(workdir / "no-existe"))

        assert main.get_current_directory()["workingDirectory"] == str(workdir)

    def test_toggle_auto_execute(self, workdir):
        response = main.toggle_auto_execute(False)

        assert response == {"autoExecute": False, "message": "Ejecución automática deshabilitada"}


class TestReportingTools:
    """Integration tests for export, import and cleanup tools."""

    def test_export_to_markdown(self, workdir):
        main.add_task("Generar notas", "desc")

        markdown = main.export_to_markdown()["markdown"]

        assert markdown.startswith("# Lista de Tareas")
        assert "## Generar notas (ID: task-1)" in markdown

    def test_import_from_sequential_thinking(self, workdir):
        response = main.import_from_sequential_thinking({"thoughts": [
            {"id": 1, "content": "Diseñar esquema de base de datos", "nextThoughtNeeded": True},
            {"id": 2, "content": "Implementar endpoints REST", "branchFromThought": 1},
        ]})

        assert response["count"] == 2
        assert response["message"] == "2 tareas importadas desde MCP Pensamiento Secuencial"
        assert response["imported"][1]["dependencies"] == ["task-1"]

    def test_remove_duplicate_tasks(self, workdir):
        records = [
            {"id": "task-1", "title": "X", "description": "", "status": "pending", "createdAt": "2024-01-01T00:00:00.000Z"},
            {"id": "task-2", "title": "x", "description": "", "status": "pending", "createdAt": "2024-01-01T00:00:00.000Z"},
            {"id": "task-3", "title": "X", "description": "", "status": "completed", "createdAt": "2024-01-01T00:00:00.000Z"},
        ]
        (workdir / "tasks.json").write_text(json.dumps(records), encoding="utf-8")

        response = main.remove_duplicate_tasks()

        assert response["removedCount"] == 1
        assert response["remainingTasks"] == 2
        stored = json.loads((workdir / "tasks.json").read_text(encoding="utf-8"))
        assert [record["id"] for record in stored] == ["task-1", "task-3"]

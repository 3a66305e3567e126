"""MCP server exposing the TasksJASR task registry tools."""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from tasksjasr import (
    HandlerFailure,
    Settings,
    TaskManager,
    TaskNotFound,
    DuplicateWarning,
)
from tasksjasr.instructions import format_creation_message
from tasksjasr.tasksjasr_logging import setup_logging

mcp = FastMCP("tasksjasr")


_MANAGER: Optional[TaskManager] = None
_SETTINGS: Optional[Settings] = None


def _settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def _manager() -> TaskManager:
    global _MANAGER
    if _MANAGER is None:
        _MANAGER = TaskManager.from_settings(_settings())
    return _MANAGER


def _reset(settings: Optional[Settings] = None) -> None:
    """Forget the current manager so the next tool call rebuilds it."""
    global _MANAGER, _SETTINGS
    _MANAGER = None
    _SETTINGS = settings


def _not_found(error: TaskNotFound) -> ValueError:
    return ValueError(str(error))


@mcp.tool()
def add_task(title: str, description: str) -> Dict[str, Any]:
    """Add a new task to the registry.

    Returns the created task with execution instructions for the agent, or a
    duplicate warning carrying the existing task when a similar one exists."""

    result = _manager().add_task(title, description)
    if isinstance(result, DuplicateWarning):
        return result.to_dict()

    return {
        "task": result.to_dict(),
        "message": format_creation_message(result),
    }


@mcp.tool()
def list_tasks(filter: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """List all tasks, or only those whose fields exactly match `filter` (e.g. {"status": "pending"})."""

    tasks = _manager().list_tasks(filter or {})
    return {
        "tasks": [task.to_dict() for task in tasks],
        "total_count": len(tasks),
        "filters_applied": filter or {},
    }


@mcp.tool()
def update_task(taskId: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    """Update fields of an existing task (title, description, status, ...)."""

    try:
        task = _manager().update_task(taskId, updates)
    except TaskNotFound as e:
        raise _not_found(e) from e
    return {"success": True, "task": task.to_dict(), "message": f"Tarea {taskId} actualizada exitosamente"}


@mcp.tool()
def delete_task(taskId: str) -> Dict[str, Any]:
    """Delete a task."""

    try:
        _manager().delete_task(taskId)
    except TaskNotFound as e:
        raise _not_found(e) from e
    return {"success": True, "message": f"Tarea {taskId} eliminada exitosamente"}


@mcp.tool()
def export_to_markdown() -> Dict[str, str]:
    """Export every task as a Markdown report."""

    return {"markdown": _manager().to_markdown()}


@mcp.tool()
def import_from_sequential_thinking(sequentialThoughtData: Dict[str, Any]) -> Dict[str, Any]:
    """Import tasks from Sequential Thinking MCP thoughts.

    Expects {"thoughts": [{"id", "content", "nextThoughtNeeded", "branchFromThought", "isRevision"}]}."""

    imported = _manager().import_from_sequential_thinking(sequentialThoughtData)
    return {
        "imported": imported,
        "count": len(imported),
        "message": f"{len(imported)} tareas importadas desde MCP Pensamiento Secuencial",
    }


@mcp.tool()
def execute_task(taskId: str) -> Dict[str, Any]:
    """Execute one task now with the strategy matching its description."""

    try:
        result = _manager().execute_task(taskId)
    except TaskNotFound as e:
        raise _not_found(e) from e
    except HandlerFailure as e:
        raise RuntimeError(f"Error ejecutando tarea {taskId}: {e}") from e
    return {"taskId": taskId, "result": result.to_dict()}


@mcp.tool()
def execute_pending_tasks() -> Dict[str, Any]:
    """Execute every pending task; each outcome is reported independently."""

    outcomes = _manager().execute_pending_tasks()
    return {
        "results": [outcome.to_dict() for outcome in outcomes],
        "count": len(outcomes),
        "failed": sum(1 for outcome in outcomes if not outcome.success),
    }


@mcp.tool()
def get_execution_stats() -> Dict[str, Any]:
    """Task counts per status."""

    return _manager().get_execution_stats().to_dict()


@mcp.tool()
def toggle_auto_execute(enabled: bool) -> Dict[str, Any]:
    """Enable or disable the auto-execute flag."""

    _manager().set_auto_execute(enabled)
    return {
        "autoExecute": enabled,
        "message": f"Ejecución automática {'habilitada' if enabled else 'deshabilitada'}",
    }


@mcp.tool()
def set_working_directory(directory: str) -> Dict[str, Any]:
    """Point the registry at another existing directory; tasks are loaded from there."""

    current = _manager()
    settings = _settings().with_working_directory(directory)
    _reset(settings)
    manager = _manager()
    manager.set_auto_execute(current.auto_execute)
    return {
        "workingDirectory": str(manager.working_directory),
        "tasksFilePath": str(settings.tasks_file),
        "totalTasks": len(manager.store),
        "message": f"✅ Directorio de trabajo actualizado a: {manager.working_directory}",
    }


@mcp.tool()
def get_current_directory() -> Dict[str, Any]:
    """Report the working directory, tasks file and task count."""

    manager = _manager()
    save_error = manager.store.last_save_error
    return {
        "workingDirectory": str(manager.working_directory),
        "tasksFilePath": str(_settings().tasks_file),
        "totalTasks": len(manager.store),
        "autoExecute": manager.auto_execute,
        "lastSaveError": str(save_error) if save_error else None,
    }


@mcp.tool()
def remove_duplicate_tasks() -> Dict[str, Any]:
    """Remove tasks that repeat the title and status of an earlier task."""

    summary = _manager().remove_duplicate_tasks()
    return {
        **summary.to_dict(),
        "message": (
            f"🧹 Tareas eliminadas: {summary.removed_count}. "
            f"Tareas restantes: {summary.remaining_tasks}."
        ),
    }


if __name__ == "__main__":
    settings = _settings()
    setup_logging(settings.log_level, settings.log_file)
    mcp.run(transport="stdio")

"""Strategy handlers that carry out a task inside the working directory."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import HandlerFailure
from .extraction import (
    extract_command,
    extract_component_name,
    extract_dependency_name,
    extract_file_content,
    extract_file_name,
    extract_folder_name,
    extract_modifications,
)
from .models import ExecutionResult, Task, utc_timestamp
from .strategies import Strategy, resolve_strategy
from .tasksjasr_logging import log_performance


logger = logging.getLogger("tasksjasr.executor")

COMMAND_TIMEOUT_SECONDS = 30.0
EXECUTION_LOG_PATH = Path("Tasks") / "execution_log.json"


class TaskExecutor:
    """Runs the handler matching a task and reports its result.

    Handlers return a result string or raise ``HandlerFailure``; every
    filesystem path they touch must stay inside ``working_directory``.
    """

    def __init__(self, working_directory: Path | str, *, command_timeout: float = COMMAND_TIMEOUT_SECONDS):
        self.working_directory = Path(working_directory).resolve()
        self.command_timeout = command_timeout

    @log_performance("execute_handler")
    def execute(self, task: Task) -> ExecutionResult:
        """Execute ``task`` with its strategy, or the generic fallback."""
        strategy = resolve_strategy(task.title, task.description)
        logger.info(f"Executing task {task.id} ({task.title}) with strategy {strategy.value if strategy else 'generic'}")

        try:
            result = self._dispatch(strategy, task)
        except HandlerFailure:
            raise
        except OSError as e:
            raise HandlerFailure(f"Error de sistema de archivos: {e}", kind="filesystem") from e

        return ExecutionResult(success=True, result=result, executed_at=utc_timestamp())

    def _dispatch(self, strategy: Optional[Strategy], task: Task) -> str:
        if strategy is Strategy.CREATE_FILE:
            return self.create_file(task)
        elif strategy is Strategy.CREATE_FOLDER:
            return self.create_folder(task)
        elif strategy is Strategy.WRITE_CODE:
            return self.write_code(task)
        elif strategy is Strategy.EXECUTE_COMMAND:
            return self.execute_command(task)
        elif strategy is Strategy.INSTALL_DEPENDENCY:
            return self.install_dependency(task)
        elif strategy is Strategy.CREATE_COMPONENT:
            return self.create_component(task)
        elif strategy is Strategy.MODIFY_FILE:
            return self.modify_file(task)
        return self.generic_execution(task)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def create_file(self, task: Task) -> str:
        file_name = extract_file_name(task.description)
        content = extract_file_content(task.description)

        path = self._resolve(file_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

        return f"Archivo creado: {file_name}"

    def create_folder(self, task: Task) -> str:
        folder_name = extract_folder_name(task.description)
        self._resolve(folder_name).mkdir(parents=True, exist_ok=True)
        return f"Carpeta creada: {folder_name}"

    def write_code(self, task: Task) -> str:
        file_name = extract_file_name(task.description)

        path = self._resolve(file_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self._render_code(task), encoding="utf-8")

        return f"Código escrito en: {file_name}"

    def execute_command(self, task: Task) -> str:
        """Run the described shell command, failing on timeout or non-zero exit."""
        command = extract_command(task.description)
        output = self._run(command, timeout=self.command_timeout, error_prefix="Error ejecutando comando")
        return f"Comando ejecutado: {command}\nSalida: {output}"

    def install_dependency(self, task: Task) -> str:
        dependency = extract_dependency_name(task.description)
        self._run(f"npm install {dependency}", timeout=None, error_prefix="Error instalando dependencia")
        return f"Dependencia instalada: {dependency}"

    def create_component(self, task: Task) -> str:
        component_name = extract_component_name(task.description)
        file_name = f"{component_name}.js"

        path = self._resolve(Path("src") / "components" / file_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self._render_component(component_name, task), encoding="utf-8")

        return f"Componente creado: {file_name}"

    def modify_file(self, task: Task) -> str:
        file_name = extract_file_name(task.description)
        modifications = extract_modifications(task.description)

        path = self._resolve(file_name)
        if not path.is_file():
            raise HandlerFailure(f"Archivo no encontrado: {file_name}", kind="not_found")

        content = path.read_text(encoding="utf-8")
        content += f"\n// Modificación automática: {modifications}"
        path.write_text(content, encoding="utf-8")

        return f"Archivo modificado: {file_name}"

    def generic_execution(self, task: Task) -> str:
        """Record an unrecognized task in the execution log without touching anything else."""
        log_path = self._resolve(EXECUTION_LOG_PATH)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        entries: List[Dict[str, Any]] = []
        if log_path.exists():
            try:
                entries = json.loads(log_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise HandlerFailure(f"Registro de ejecución corrupto: {log_path}: {e}", kind="filesystem") from e

        entries.append({
            "taskId": task.id,
            "title": task.title,
            "description": task.description,
            "executedAt": utc_timestamp(),
            "status": "executed_generically",
        })
        log_path.write_text(json.dumps(entries, indent=2, ensure_ascii=False), encoding="utf-8")

        return "Tarea ejecutada genéricamente y registrada en log"

    # ------------------------------------------------------------------
    # Private helper methods
    # ------------------------------------------------------------------

    def _resolve(self, relative: Path | str) -> Path:
        path = (self.working_directory / relative).resolve()
        if path != self.working_directory and self.working_directory not in path.parents:
            raise HandlerFailure(
                f"La ruta {relative} queda fuera del directorio de trabajo {self.working_directory}",
                kind="outside_workdir",
            )
        return path

    def _run(self, command: str, *, timeout: Optional[float], error_prefix: str) -> str:
        logger.info(f"Running command in {self.working_directory}: {command}")
        try:
            completed = subprocess.run(
                command,
                shell=True,
                cwd=self.working_directory,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise HandlerFailure(
                f"{error_prefix}: el comando '{command}' excedió el tiempo límite de {timeout:g} segundos",
                kind="timeout",
            ) from e
        except OSError as e:
            raise HandlerFailure(f"{error_prefix}: {e}", kind="error") from e

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise HandlerFailure(
                f"{error_prefix}: '{command}' terminó con código {completed.returncode}: {detail}",
                kind="exit",
            )
        return completed.stdout

    def _render_code(self, task: Task) -> str:
        return (
            f"// Código generado automáticamente para: {task.title}\n"
            f"// Descripción: {task.description}\n"
            f"// Generado el: {utc_timestamp()}\n"
            "\n"
            "console.log('Código ejecutado automáticamente');\n"
        )

    def _render_component(self, component_name: str, task: Task) -> str:
        return (
            f"// Componente {component_name} generado automáticamente\n"
            f"// Tarea: {task.title}\n"
            f"// Descripción: {task.description}\n"
            "\n"
            "import React from 'react';\n"
            "\n"
            f"const {component_name} = () => {{\n"
            "    return (\n"
            "        <div>\n"
            f"            <h1>{component_name}</h1>\n"
            "            <p>Componente generado automáticamente</p>\n"
            "        </div>\n"
            "    );\n"
            "};\n"
            "\n"
            f"export default {component_name};\n"
        )

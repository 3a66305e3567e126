"""Execution instructions handed to the calling agent when a task is created."""

from __future__ import annotations

from pathlib import Path
from typing import List

from .extraction import (
    extract_command,
    extract_component_name,
    extract_dependency_name,
    extract_file_content,
    extract_file_name,
    extract_folder_name,
)
from .models import ExecutionInstructions, Task
from .strategies import task_text


# Checked in this order, which is not the STRATEGY_TRIGGERS order.
ACTION_TYPES = (
    ("crear archivo", "create_file"),
    ("crear carpeta", "create_folder"),
    ("instalar dependencia", "install_dependency"),
    ("ejecutar comando", "execute_command"),
    ("crear componente", "create_component"),
    ("modificar archivo", "modify_file"),
    ("escribir código", "write_code"),
)
GENERIC_ACTION = "generic_task"


def detect_action_type(text: str) -> str:
    for phrase, action_type in ACTION_TYPES:
        if phrase in text:
            return action_type
    return GENERIC_ACTION


def generate_execution_instructions(task: Task, working_directory: Path | str) -> ExecutionInstructions:
    """Build step-by-step instructions for every action the task text mentions.

    Several sections may apply to one task; when none does, generic
    analysis steps are returned instead.
    """
    text = task_text(task.title, task.description)
    description = task.description
    workdir = str(working_directory)

    steps: List[str] = []
    tools: List[str] = []

    if "crear archivo" in text:
        steps += [
            "Crear un archivo usando la herramienta fsWrite",
            f"Nombre del archivo: {extract_file_name(description)}",
            f"Contenido: {extract_file_content(description)}",
        ]
        tools.append("fsWrite")

    if "crear carpeta" in text or "crear directorio" in text:
        steps += [
            "Crear directorio usando fsWrite",
            f"Nombre del directorio: {extract_folder_name(description)}",
        ]
        tools.append("fsWrite")

    if "instalar" in text and "dependencia" in text:
        steps += [
            "Ejecutar comando de instalación usando executePwsh",
            f"Comando: npm install {extract_dependency_name(description)}",
            f"Directorio: {workdir}",
        ]
        tools.append("executePwsh")

    if "ejecutar comando" in text:
        steps += [
            "Ejecutar el siguiente comando usando executePwsh",
            f"Comando: {extract_command(description)}",
            f"Directorio: {workdir}",
        ]
        tools.append("executePwsh")

    if "crear componente" in text:
        component_name = extract_component_name(description)
        steps += [
            "Crear componente React usando fsWrite",
            f"Nombre: {component_name}",
            f"Ubicación: src/components/{component_name}.js",
            "Generar código de componente React básico",
        ]
        tools.append("fsWrite")

    if "modificar archivo" in text:
        steps += [
            "Leer el archivo existente usando readFile",
            f"Archivo: {extract_file_name(description)}",
            "Realizar las modificaciones especificadas",
            "Guardar cambios usando strReplace o fsWrite",
        ]
        tools += ["readFile", "strReplace"]

    if not steps:
        steps = [
            f'Analizar la descripción de la tarea: "{description}"',
            "Determinar las acciones necesarias para completar la tarea",
            "Usar las herramientas apropiadas del IDE para ejecutar la tarea",
            "Actualizar el estado de la tarea cuando esté completada",
        ]
        tools = ["readFile", "fsWrite", "executePwsh"]

    return ExecutionInstructions(
        task_id=task.id,
        action_type=detect_action_type(text),
        working_directory=workdir,
        specific_instructions=steps,
        suggested_tools=tools,
    )


def format_creation_message(task: Task) -> str:
    """Human-readable confirmation for a newly created task."""
    instructions = task.execution_instructions
    lines = [
        f"✅ TAREA CREADA: {task.title} (ID: {task.id})",
        "",
        f"📋 DESCRIPCIÓN: {task.description}",
        "",
    ]

    if not instructions or not instructions.specific_instructions:
        lines.append("⚠️ Esta tarea requiere análisis manual para determinar las acciones específicas.")
        return "\n".join(lines) + "\n"

    lines.append("🤖 INSTRUCCIONES PARA EJECUTAR ESTA TAREA:")
    lines.append("")
    lines += [f"{index}. {step}" for index, step in enumerate(instructions.specific_instructions, start=1)]
    if instructions.suggested_tools:
        lines += ["", f"🔧 HERRAMIENTAS SUGERIDAS: {', '.join(instructions.suggested_tools)}"]
    lines += [
        "",
        f"📁 DIRECTORIO DE TRABAJO: {instructions.working_directory}",
        "",
        "⚡ ACCIÓN REQUERIDA: Por favor, ejecuta estas instrucciones ahora para completar la tarea.",
        f'Cuando termines, actualiza el estado de la tarea usando: update_task con taskId "{task.id}" y status "completed"',
    ]
    return "\n".join(lines) + "\n"

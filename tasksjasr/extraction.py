"""Parameter extraction from free-text task descriptions.

Each extractor looks for the value that follows a Spanish keyword and
falls back to a fixed default when the description does not provide one.
"""

from __future__ import annotations

import re
from typing import Pattern


DEFAULT_FILE_NAME = "nuevo_archivo.txt"
DEFAULT_FOLDER_NAME = "nueva_carpeta"
DEFAULT_COMMAND = 'echo "Comando no especificado"'
DEFAULT_DEPENDENCY = "express"
DEFAULT_COMPONENT_NAME = "NuevoComponente"
DEFAULT_FILE_CONTENT = "// Contenido generado automáticamente"
DEFAULT_MODIFICATION = "modificación no especificada"

_FILE_NAME = re.compile(r"archivo\s+[\"']?([^\"'\s]+)[\"']?", re.IGNORECASE)
_FOLDER_NAME = re.compile(r"carpeta\s+[\"']?([^\"'\s]+)[\"']?", re.IGNORECASE)
_COMMAND = re.compile(r"comando\s+[\"']?([^\"']+)[\"']?", re.IGNORECASE)
_DEPENDENCY = re.compile(r"dependencia\s+[\"']?([^\"'\s]+)[\"']?", re.IGNORECASE)
_COMPONENT_NAME = re.compile(r"componente\s+[\"']?([^\"'\s]+)[\"']?", re.IGNORECASE)
_FILE_CONTENT = re.compile(r"contenido\s*:\s*[\"']?([^\"']+)[\"']?", re.IGNORECASE)
_MODIFICATION = re.compile(r"modificar\s+(.+)", re.IGNORECASE)


def _first_group(pattern: Pattern[str], text: str, default: str) -> str:
    match = pattern.search(text or "")
    return match.group(1) if match else default


def extract_file_name(description: str) -> str:
    return _first_group(_FILE_NAME, description, DEFAULT_FILE_NAME)


def extract_folder_name(description: str) -> str:
    return _first_group(_FOLDER_NAME, description, DEFAULT_FOLDER_NAME)


def extract_command(description: str) -> str:
    """Quoted or bare text after "comando", up to the next quote."""
    return _first_group(_COMMAND, description, DEFAULT_COMMAND)


def extract_dependency_name(description: str) -> str:
    return _first_group(_DEPENDENCY, description, DEFAULT_DEPENDENCY)


def extract_component_name(description: str) -> str:
    return _first_group(_COMPONENT_NAME, description, DEFAULT_COMPONENT_NAME)


def extract_file_content(description: str) -> str:
    """Text after "contenido:", up to the next quote."""
    return _first_group(_FILE_CONTENT, description, DEFAULT_FILE_CONTENT)


def extract_modifications(description: str) -> str:
    """Rest of the line after "modificar"."""
    return _first_group(_MODIFICATION, description, DEFAULT_MODIFICATION)

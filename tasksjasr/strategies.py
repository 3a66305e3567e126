"""Keyword-triggered execution strategies.

A task is matched against ``STRATEGY_TRIGGERS`` in registration order and
the first trigger found anywhere in its title or description wins. The
order of the tuple is part of the contract: a task mentioning both
"crear archivo" and "ejecutar comando" always resolves to CREATE_FILE.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple


class Strategy(str, Enum):
    CREATE_FILE = "create_file"
    CREATE_FOLDER = "create_folder"
    WRITE_CODE = "write_code"
    EXECUTE_COMMAND = "execute_command"
    INSTALL_DEPENDENCY = "install_dependency"
    CREATE_COMPONENT = "create_component"
    MODIFY_FILE = "modify_file"


STRATEGY_TRIGGERS: Tuple[Tuple[str, Strategy], ...] = (
    ("crear archivo", Strategy.CREATE_FILE),
    ("crear carpeta", Strategy.CREATE_FOLDER),
    ("escribir código", Strategy.WRITE_CODE),
    ("ejecutar comando", Strategy.EXECUTE_COMMAND),
    ("instalar dependencia", Strategy.INSTALL_DEPENDENCY),
    ("crear componente", Strategy.CREATE_COMPONENT),
    ("modificar archivo", Strategy.MODIFY_FILE),
)


def task_text(title: str, description: str) -> str:
    """Lower-cased "<title> <description>" blob used for keyword matching."""
    return f"{(title or '').lower()} {(description or '').lower()}"


def resolve_strategy(title: str, description: str) -> Optional[Strategy]:
    """First registered strategy whose trigger appears in the task text."""
    text = task_text(title, description)
    for trigger, strategy in STRATEGY_TRIGGERS:
        if trigger in text:
            return strategy
    return None

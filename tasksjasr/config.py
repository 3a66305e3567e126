"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


WORKING_DIR_ENV = "TASKSJASR_WORKING_DIR"
TASKS_FILE_ENV = "TASKSJASR_FILE_PATH"
AUTO_EXECUTE_ENV = "TASKSJASR_AUTO_EXECUTE"
LOG_LEVEL_ENV = "TASKSJASR_LOG_LEVEL"
LOG_FILE_ENV = "TASKSJASR_LOG_FILE"

DEFAULT_TASKS_FILE = "tasks.json"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(raw: str, name: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Environment variable {name} must be a boolean, got '{raw}'.")


@dataclass(frozen=True, slots=True)
class Settings:
    """Where tasks live and how the registry behaves.

    ``tasks_file_setting`` keeps the configured value as given so that
    relative paths can be re-rooted when the working directory changes.
    """

    working_directory: Path
    tasks_file_setting: str = DEFAULT_TASKS_FILE
    auto_execute: bool = True
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @property
    def tasks_file(self) -> Path:
        path = Path(self.tasks_file_setting).expanduser()
        if path.is_absolute():
            return path
        return self.working_directory / path

    def with_working_directory(self, directory: Path | str) -> "Settings":
        """Copy of these settings rooted at another existing directory."""
        resolved = Path(directory).expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"Directorio no encontrado: {directory}")
        return replace(self, working_directory=resolved)

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from TASKSJASR_* variables; the cwd is the default working directory."""
        env_root = os.getenv(WORKING_DIR_ENV)
        if env_root:
            working_directory = Path(env_root).expanduser().resolve()
            if not working_directory.exists():
                raise ValueError(
                    f"Environment variable {WORKING_DIR_ENV} points to '{env_root}', which does not exist."
                )
        else:
            working_directory = Path.cwd().resolve()

        auto_execute_raw = os.getenv(AUTO_EXECUTE_ENV)
        log_file = os.getenv(LOG_FILE_ENV)

        return cls(
            working_directory=working_directory,
            tasks_file_setting=os.getenv(TASKS_FILE_ENV) or DEFAULT_TASKS_FILE,
            auto_execute=_parse_bool(auto_execute_raw, AUTO_EXECUTE_ENV) if auto_execute_raw else True,
            log_level=(os.getenv(LOG_LEVEL_ENV) or "INFO").upper(),
            log_file=Path(log_file).expanduser() if log_file else None,
        )

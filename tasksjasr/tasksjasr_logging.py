"""Logging utilities for TasksJASR.

Everything logs under the ``tasksjasr`` logger hierarchy. Console output
goes to stderr so it never mixes with the MCP stdio transport; an optional
file receives one JSON object per line. Structured data travels on the
record as ``extra_fields``.
"""

from __future__ import annotations

import json
import time
import logging as std_logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Dict, Optional, Union


LOGGER_NAME = "tasksjasr"
CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def _logger(suffix: str) -> std_logging.Logger:
    return std_logging.getLogger(f"{LOGGER_NAME}.{suffix}")


def _fields(**fields: Any) -> Dict[str, Any]:
    return {"extra_fields": fields}


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> None:
    """Route ``tasksjasr`` logs to stderr and, optionally, a JSON-lines file.

    Safe to call again: previous handlers are closed and replaced.
    """
    root = std_logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(log_level)

    console = std_logging.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(std_logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        json_lines = std_logging.FileHandler(log_path, encoding="utf-8")
        json_lines.setLevel(std_logging.DEBUG)
        json_lines.setFormatter(JsonFormatter())
        root.addHandler(json_lines)

    root.info(f"Logging to stderr{f' and {log_file}' if log_file else ''} at level {std_logging.getLevelName(root.level)}")


class JsonFormatter(std_logging.Formatter):
    """One JSON object per record; ``extra_fields`` are merged at the top level."""

    def format(self, record: std_logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def log_performance(operation_name: str):
    """Time the wrapped call; failures are logged as warnings and re-raised."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = _logger("performance")
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - started
                logger.warning(
                    f"{operation_name} failed after {elapsed:.3f}s: {e}",
                    extra=_fields(operation=operation_name, duration=elapsed, status="error",
                                  error_type=type(e).__name__),
                )
                raise
            elapsed = time.perf_counter() - started
            logger.debug(
                f"{operation_name} took {elapsed:.3f}s",
                extra=_fields(operation=operation_name, duration=elapsed, status="success"),
            )
            return result
        return wrapper
    return decorator


@contextmanager
def log_operation(operation_name: str, **context):
    """Log the completion or failure of a block with ``context`` attached."""
    logger = _logger("operations")
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        logger.error(
            f"{operation_name} failed: {e}",
            extra=_fields(operation=operation_name, status="failed", error_type=type(e).__name__,
                          duration=time.perf_counter() - started, **context),
        )
        raise
    logger.info(
        f"{operation_name} done",
        extra=_fields(operation=operation_name, status="completed",
                      duration=time.perf_counter() - started, **context),
    )


def log_task_event(event_type: str, task_id: Optional[str] = None, **data) -> None:
    """Record a task lifecycle event (task_created, task_failed, ...)."""
    suffix = f" {task_id}" if task_id else ""
    _logger("events").info(
        f"{event_type}{suffix}",
        extra=_fields(event_type=event_type, task_id=task_id, **data),
    )


def log_error_with_context(error: Exception, context: Dict[str, Any], **extra_fields):
    """Log ``error`` with its traceback and the operation context it happened in."""
    operation = context.get("operation", "unknown operation")
    _logger("errors").error(
        f"{operation}: {type(error).__name__}: {error}",
        extra=_fields(error_type=type(error).__name__, error_message=str(error), context=context, **extra_fields),
        exc_info=error,
    )

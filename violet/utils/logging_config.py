"""
Logging configuration using structlog.

Every line a task emits carries a ``task`` key; the console renderer shows
it as a ``[name]`` prefix so interleaved output of concurrent tasks stays
readable.
"""

import logging
from typing import Any, Literal

import structlog


def prefix_task_name(_logger: Any, _method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Move the ``task`` key into the event text as a ``[name]`` prefix."""
    task = event_dict.pop("task", None)
    if task is not None:
        event_dict["event"] = f"[{task}] {event_dict.get('event', '')}"
    return event_dict


def configure_logging(log_level: int | str = "INFO", log_format: Literal["console", "json"] = "console") -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum stdlib log level (name or number)
        log_format: ``console`` for human-readable lines, ``json`` for one
            JSON object per line
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(prefix_task_name)
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


"""Severity threshold shared by every task of one registry.

One ``LogGate`` is created per registry and handed by reference to each
task it declares, so a single ``log_level`` call governs log actions,
command output, usage warnings and completion lines alike.
"""

from typing import Any

import structlog

from violet.enums import LogLevel, Severity
from violet.exceptions import ConfigurationError

LOGGER_NAME = "violet"


class LogGate:
    """Decides whether a message of a given severity is emitted.

    Attributes:
        level: Current threshold
        sealed: Once True, the threshold can no longer change
        pinned: Once True, ``set_level`` validates but keeps the current level
    """

    def __init__(self, level: LogLevel | str = LogLevel.LOG) -> None:
        self.level = _parse_level(level)
        self.sealed = False
        self.pinned = False

    def set_level(self, level: LogLevel | str) -> None:
        """Change the threshold.

        Raises:
            ConfigurationError: If the gate is sealed or the level is unknown
        """
        if self.sealed:
            raise ConfigurationError("Log level can only be set while tasks are being declared")
        parsed = _parse_level(level)
        if not self.pinned:
            self.level = parsed

    def pin(self, level: LogLevel | str) -> None:
        """Set the threshold and ignore later ``set_level`` calls.

        Used for a level chosen on the command line, which must hold while
        the definition file runs and win over any level it sets.
        """
        if self.sealed:
            raise ConfigurationError("Log level can only be set while tasks are being declared")
        self.level = _parse_level(level)
        self.pinned = True

    def seal(self) -> None:
        self.sealed = True

    def allows(self, severity: Severity) -> bool:
        """Check whether ``severity`` passes the current threshold."""
        rank = self.level.rank
        return rank != 0 and severity.rank <= rank

    def emit(self, task_name: str, severity: Severity, *values: Any) -> bool:
        """Emit one line for ``task_name`` if the threshold allows it.

        Values are rendered with ``str`` and joined by single spaces.

        Returns:
            True if the line was emitted
        """
        if not self.allows(severity):
            return False
        message = " ".join(str(v) for v in values)
        logger = structlog.get_logger(LOGGER_NAME).bind(task=task_name)
        getattr(logger, severity.method)(message)
        return True

    def log(self, task_name: str, *values: Any) -> bool:
        return self.emit(task_name, Severity.LOG, *values)

    def warn(self, task_name: str, *values: Any) -> bool:
        return self.emit(task_name, Severity.WARN, *values)

    def error(self, task_name: str, *values: Any) -> bool:
        return self.emit(task_name, Severity.ERROR, *values)


def _parse_level(level: LogLevel | str) -> LogLevel:
    try:
        return LogLevel(str(level).lower())
    except ValueError as e:
        allowed = ", ".join(lvl.value for lvl in LogLevel)
        raise ConfigurationError(f"Unknown log level '{level}', expected one of: {allowed}") from e

"""Enumerations for log levels, severities and command policies."""

import logging
from enum import Enum


class LogLevel(str, Enum):
    """Log Gate thresholds, from silent to everything.

    A message is emitted when its severity rank is at or below the
    threshold rank and the threshold is not ``none``.
    """

    NONE = "none"
    ERROR = "error"
    WARN = "warn"
    LOG = "log"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Numeric threshold; 0 silences everything."""
        return _LEVEL_RANKS[self]

    @property
    def logging_level(self) -> int:
        """Equivalent stdlib level used to configure the structlog filter."""
        return _LEVEL_LOGGING[self]


class Severity(str, Enum):
    """Severity of a single emitted message."""

    LOG = "log"
    WARN = "warn"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Lower is more severe; compared against ``LogLevel.rank``."""
        return _SEVERITY_RANKS[self]

    @property
    def method(self) -> str:
        """Name of the structlog method the message is emitted through."""
        return _SEVERITY_METHODS[self]


class StderrPolicy(str, Enum):
    """How a shell command's standard error output is treated.

    - fail: any non-empty stderr fails the command, whatever the exit code
    - log: stderr is logged as a warning, only the exit code decides
    """

    FAIL = "fail"
    LOG = "log"

    def __str__(self) -> str:
        return self.value


_LEVEL_RANKS = {
    LogLevel.NONE: 0,
    LogLevel.ERROR: 1,
    LogLevel.WARN: 2,
    LogLevel.LOG: 3,
}

_LEVEL_LOGGING = {
    LogLevel.NONE: logging.CRITICAL,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.LOG: logging.INFO,
}

_SEVERITY_RANKS = {
    Severity.ERROR: 1,
    Severity.WARN: 2,
    Severity.LOG: 3,
}

_SEVERITY_METHODS = {
    Severity.ERROR: "error",
    Severity.WARN: "warning",
    Severity.LOG: "info",
}

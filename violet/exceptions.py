"""Custom exception hierarchy for the violet task runner.

This module defines a structured exception hierarchy so callers can tell
configuration problems, missing task definitions, failed shell commands
and failed task pipelines apart.

Exception Hierarchy:
    VioletError (base)
    ├── ConfigurationError
    ├── DefinitionError
    │   └── DefinitionNotFoundError
    ├── CommandError
    ├── TaskExecutionError
    └── DependencyCycleError

Example Usage:
    >>> from violet.exceptions import TaskExecutionError
    >>> try:
    ...     await registry.run("build")
    ... except TaskExecutionError as e:
    ...     print(e.task_name, e.__cause__)
"""

from collections.abc import Sequence


class VioletError(Exception):
    """Base exception for all violet errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(VioletError):
    """Configuration-related errors.

    Examples:
        - Settings file not found or not valid YAML
        - Unknown log level name
        - Log level changed after the task definitions were sealed
    """

    pass


class DefinitionError(VioletError):
    """The task-definition file could not be loaded.

    Attributes:
        path: Path of the definition file, when one was found
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            path: Path of the offending definition file
        """
        self.path = path

        full_message = message
        if path:
            full_message = f"{message} (file: {path})"

        super().__init__(full_message)
        self.message = message


class DefinitionNotFoundError(DefinitionError):
    """No definition file matching the expected name exists."""

    pass


class CommandError(VioletError):
    """A shell command failed.

    Raised on non-zero exit, launch failure, timeout, or (under the
    ``fail`` stderr policy) any output on standard error.

    Attributes:
        command: The command line that was executed
        returncode: Process exit code, None if the process never ran
        stderr: Captured standard error text
    """

    def __init__(
        self,
        message: str,
        command: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            command: The command line that was executed
            returncode: Process exit code, if known
            stderr: Captured standard error text
        """
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class TaskExecutionError(VioletError):
    """An action inside a task pipeline failed.

    The original exception is always chained as ``__cause__``.

    Attributes:
        task_name: Name of the task whose pipeline failed
        action: Kind of the failing action (run, parallel, exec, log)
    """

    def __init__(
        self,
        message: str,
        task_name: str | None = None,
        action: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            task_name: Name of the failed task
            action: Kind of action that failed
        """
        self.task_name = task_name
        self.action = action

        parts = [message]
        if task_name:
            parts.append(f"task: {task_name}")
        if action:
            parts.append(f"action: {action}")

        full_message = message if len(parts) == 1 else f"{message} ({', '.join(parts[1:])})"
        super().__init__(full_message)
        # Preserve original message
        self.message = message


class DependencyCycleError(VioletError):
    """A task depends on itself, directly or through other tasks.

    Attributes:
        cycle: Task names forming the cycle, first and last entries equal
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        """Initialize exception.

        Args:
            cycle: Task names forming the cycle
        """
        self.cycle = list(cycle)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.cycle)}")

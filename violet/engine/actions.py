"""
Actions: the steps of a task pipeline.

Each action kind is a small dataclass with an async ``execute`` method that
receives the ``TaskRun`` it belongs to:

- Sequential: one function, awaited if it returns an awaitable
- Parallel: several functions started together, awaited as a group
- Command: an argument list joined with spaces and run through the shell
- Log: a message emitted through the Log Gate at a fixed severity

Action functions take the current context and return either a replacement
context or None. Sync and async functions are both accepted.

Example:
    >>> run = TaskRun(task_name="build", slot=ContextSlot(), gate=LogGate(), settings=VioletSettings())
    >>> await Sequential(lambda ctx: {"built": True}).execute(run)
    >>> run.slot.current
    {'built': True}
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from violet.config.settings import VioletSettings
from violet.engine.concurrency import run_concurrently
from violet.engine.context import Context, ContextSlot
from violet.engine.log_gate import LogGate
from violet.enums import Severity, StderrPolicy
from violet.exceptions import CommandError
from violet.utils.async_subprocess import ShellRunner, run_shell_command

ActionFunction = Callable[[Context], Context | None | Awaitable[Context | None]]


@dataclass
class TaskRun:
    """State of one execution of one task.

    Attributes:
        task_name: Name used to tag every emitted line
        slot: Live context of this run
        gate: Shared Log Gate
        settings: Shared runner settings
        shell: Adapter used by Command actions
    """

    task_name: str
    slot: ContextSlot
    gate: LogGate
    settings: VioletSettings
    shell: ShellRunner = run_shell_command


async def invoke(fn: ActionFunction, context: Context) -> Context | None:
    """Call an action function, awaiting its result if needed."""
    result = fn(context)
    if inspect.isawaitable(result):
        result = await result
    return result


class Action(ABC):
    """One step of a task pipeline."""

    kind: ClassVar[str]

    @abstractmethod
    async def execute(self, run: TaskRun) -> None:
        """Perform the step, updating ``run.slot`` as needed."""


@dataclass
class Sequential(Action):
    fn: ActionFunction

    kind: ClassVar[str] = "run"

    async def execute(self, run: TaskRun) -> None:
        run.slot.apply(await invoke(self.fn, run.slot.current))


@dataclass
class Parallel(Action):
    """Functions started together; done once every branch is done.

    Every branch receives the context as it was when the group started.
    Branches that return a value replace the context as soon as they
    finish, so when several do, the last one to finish wins.
    """

    fns: tuple[ActionFunction, ...]

    kind: ClassVar[str] = "parallel"

    async def execute(self, run: TaskRun) -> None:
        context = run.slot.current

        async def branch(fn: ActionFunction) -> None:
            run.slot.apply(await invoke(fn, context))

        await run_concurrently((branch(fn) for fn in self.fns), fail_fast=run.settings.fail_fast)


@dataclass
class Command(Action):
    """A shell command built from an argument list.

    Arguments are joined with single spaces and no quoting is added.
    """

    argv: tuple[str, ...]

    kind: ClassVar[str] = "exec"

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)

    async def execute(self, run: TaskRun) -> None:
        command = self.command_line
        settings = run.settings
        timeout = settings.command_timeout

        try:
            stdout, stderr, returncode = await run.shell(
                command,
                cwd=settings.working_directory,
                check=False,
                timeout=timeout,
            )
        except TimeoutError as e:
            message = f"Command timed out after {timeout}s: {command}"
            run.gate.error(run.task_name, message)
            raise CommandError(message, command) from e
        except OSError as e:
            message = f"Command could not be started: {command}: {e}"
            run.gate.error(run.task_name, message)
            raise CommandError(message, command) from e

        if stdout:
            run.gate.log(run.task_name, stdout.rstrip("\n"))

        if returncode != 0:
            message = f"Command failed with exit code {returncode}: {command}"
            run.gate.error(run.task_name, message)
            if stderr:
                run.gate.warn(run.task_name, stderr.rstrip("\n"))
            raise CommandError(message, command, returncode=returncode, stderr=stderr)

        if stderr:
            run.gate.warn(run.task_name, stderr.rstrip("\n"))
            if settings.stderr_policy is StderrPolicy.FAIL:
                raise CommandError(
                    f"Command wrote to stderr: {command}",
                    command,
                    returncode=returncode,
                    stderr=stderr,
                )


@dataclass
class Log(Action):
    severity: Severity
    values: tuple[Any, ...] = field(default_factory=tuple)

    kind: ClassVar[str] = "log"

    async def execute(self, run: TaskRun) -> None:
        run.gate.emit(run.task_name, self.severity, *self.values)

"""
Tasks and the fluent builder used to declare them.

A ``Task`` is a named list of dependency names plus an ordered pipeline of
actions. ``TaskBuilder`` is the handle returned by ``TaskRegistry.declare``;
every builder method appends to the task and returns the builder, and
nothing runs until the registry runs the task.

Example:
    >>> registry.declare("build") \\
    ...     .dep("clean") \\
    ...     .run(lambda ctx: {**ctx, "built": True}) \\
    ...     .exec("python", "-m", "compileall", "src") \\
    ...     .log("Build complete")
"""

from typing import Any

import structlog

from violet.config.settings import VioletSettings
from violet.engine.actions import (
    Action,
    ActionFunction,
    Command,
    Log,
    Parallel,
    Sequential,
    TaskRun,
)
from violet.engine.context import Context, ContextFactory, ContextSlot
from violet.engine.log_gate import LogGate
from violet.enums import Severity
from violet.exceptions import TaskExecutionError
from violet.utils.async_subprocess import ShellRunner, run_shell_command

log = structlog.get_logger(__name__)


class Task:
    """A named pipeline of actions with its dependencies.

    Dependencies always run first, as a block, wherever ``dep`` was called
    in the chain. Actions run strictly in declaration order.

    Attributes:
        name: Task name
        dependencies: Dependency names in declaration order, duplicates kept
        actions: Pipeline steps in declaration order
        context_factory: Builds the empty context each run starts with
    """

    def __init__(
        self,
        name: str,
        gate: LogGate,
        settings: VioletSettings,
        context_factory: ContextFactory = dict,
        shell: ShellRunner = run_shell_command,
    ) -> None:
        self.name = name
        self.gate = gate
        self.settings = settings
        self.context_factory = context_factory
        self.shell = shell
        self.dependencies: list[str] = []
        self.actions: list[Action] = []
        self._slot = ContextSlot(current=context_factory())

    def __repr__(self) -> str:
        return f"Task({self.name!r}, dependencies={self.dependencies!r}, actions={len(self.actions)})"

    @property
    def context(self) -> Context:
        """Context of the current or most recent run."""
        return self._slot.current

    async def execute(self) -> Context:
        """Run the action pipeline once, with a fresh context.

        Dependencies are not resolved here; see ``TaskRegistry.run``.

        Returns:
            The context left by the last action

        Raises:
            TaskExecutionError: If an action fails; remaining actions are
                skipped and the original error is chained as the cause
        """
        slot = ContextSlot(current=self.context_factory())
        self._slot = slot
        run = TaskRun(
            task_name=self.name,
            slot=slot,
            gate=self.gate,
            settings=self.settings,
            shell=self.shell,
        )

        for index, action in enumerate(self.actions):
            try:
                await action.execute(run)
            except Exception as e:
                reason = str(e) or type(e).__name__
                self.gate.error(self.name, f"Task failed: {reason}")
                log.debug("action_failed", task=self.name, index=index, action=action.kind, exc_info=True)
                raise TaskExecutionError(reason, task_name=self.name, action=action.kind) from e

        self.gate.log(self.name, "Task completed")
        return slot.current


class TaskBuilder:
    """Fluent handle for declaring one task.

    Methods taking variadic arguments warn and change nothing when called
    with none.
    """

    def __init__(self, task: Task) -> None:
        self.task = task

    def dep(self, *names: str) -> "TaskBuilder":
        """Add tasks that must complete before this one starts."""
        if not names:
            return self._usage_warning("dep() expects at least one task name")
        self.task.dependencies.extend(names)
        return self

    def run(self, *fns: ActionFunction) -> "TaskBuilder":
        """Add one sequential action per function, in argument order."""
        if not fns:
            return self._usage_warning("run() expects at least one function")
        self.task.actions.extend(Sequential(fn) for fn in fns)
        return self

    def parallel(self, *fns: ActionFunction) -> "TaskBuilder":
        """Add a single action running all functions concurrently."""
        if not fns:
            return self._usage_warning("parallel() expects at least one function")
        self.task.actions.append(Parallel(tuple(fns)))
        return self

    def exec(self, *argv: Any) -> "TaskBuilder":
        """Add a shell command; arguments are joined with single spaces."""
        if not argv:
            return self._usage_warning("exec() expects at least one argument")
        self.task.actions.append(Command(tuple(str(arg) for arg in argv)))
        return self

    def log(self, *values: Any) -> "TaskBuilder":
        self.task.actions.append(Log(Severity.LOG, values))
        return self

    def warn(self, *values: Any) -> "TaskBuilder":
        self.task.actions.append(Log(Severity.WARN, values))
        return self

    def error(self, *values: Any) -> "TaskBuilder":
        self.task.actions.append(Log(Severity.ERROR, values))
        return self

    def _usage_warning(self, message: str) -> "TaskBuilder":
        self.task.gate.warn(self.task.name, message)
        return self

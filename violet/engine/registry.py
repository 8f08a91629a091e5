"""
Task registry and dependency-first execution.

The registry maps task names to tasks, hands out builders while the
definition file declares tasks, and runs a requested task after all of its
dependencies.

Execution Flow:
    1. Look up the task; an unknown name completes at once as a no-op
    2. Start every declared dependency together and wait for all of them,
       resolving their own dependencies recursively under the same rule
    3. Run the task's actions strictly in declaration order
    4. Emit a completion line tagged with the task name

Error Handling:
    - A failing action aborts the rest of its task's pipeline
    - A failing dependency fails every task waiting on it
    - With ``fail_fast`` (default) the first failure cancels sibling
      dependencies still running; otherwise siblings run to completion
    - A task reached again while its own dependencies are being resolved
      raises ``DependencyCycleError``

Tasks are always fully re-run: a task reached through two dependency paths
runs twice.

Example:
    >>> registry = TaskRegistry(VioletSettings())
    >>> registry.declare("clean").exec("rm", "-rf", "build")
    >>> registry.declare("build").dep("clean").exec("make")
    >>> await registry.run("build")
"""

from collections.abc import Iterator

import structlog

from violet.config.settings import VioletSettings
from violet.engine.concurrency import run_concurrently
from violet.engine.context import Context, ContextFactory
from violet.engine.log_gate import LogGate
from violet.engine.task import Task, TaskBuilder
from violet.enums import LogLevel
from violet.exceptions import DependencyCycleError
from violet.utils.async_subprocess import ShellRunner, run_shell_command

log = structlog.get_logger(__name__)


class TaskRegistry:
    """Store of declared tasks and orchestrator of their execution.

    The registry is mutated only while tasks are declared; ``seal`` marks
    the end of that phase and freezes the log level.

    Attributes:
        settings: Runner settings shared by every task
        gate: Log Gate shared by every task
    """

    def __init__(
        self,
        settings: VioletSettings | None = None,
        shell: ShellRunner = run_shell_command,
    ) -> None:
        """Initialize an empty registry.

        Args:
            settings: Runner settings; defaults are used when omitted
            shell: Adapter every ``exec`` action runs its command through
        """
        self.settings = settings or VioletSettings()
        self.gate = LogGate(self.settings.log_level)
        self.shell = shell
        self._tasks: dict[str, Task] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def names(self) -> list[str]:
        """Declared task names, sorted."""
        return sorted(self._tasks)

    def declare(self, name: str, context_factory: ContextFactory = dict) -> TaskBuilder:
        """Create an empty task, replacing any task of the same name.

        Args:
            name: Task name
            context_factory: Builds the context each run starts with;
                pass a class to give the task a concrete state type

        Returns:
            Builder for the new task
        """
        task = Task(
            name,
            gate=self.gate,
            settings=self.settings,
            context_factory=context_factory,
            shell=self.shell,
        )
        if name in self._tasks:
            log.debug("task_redeclared", task=name)
        self._tasks[name] = task
        return TaskBuilder(task)

    add_task = declare

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def log_level(self, level: LogLevel | str) -> None:
        """Set the Log Gate threshold (none, error, warn or log).

        Raises:
            ConfigurationError: If the level is unknown or the registry
                is sealed
        """
        self.gate.set_level(level)

    def seal(self) -> None:
        """End the declaration phase."""
        self.gate.seal()

    async def run(self, name: str) -> Context | None:
        """Run a task after all of its dependencies.

        Args:
            name: Task to run

        Returns:
            The task's final context, or None if no such task exists

        Raises:
            TaskExecutionError: If the task or one of its dependencies fails
            DependencyCycleError: If the task depends on itself
        """
        return await self._run(name, ())

    async def _run(self, name: str, chain: tuple[str, ...]) -> Context | None:
        task = self._tasks.get(name)
        if task is None:
            return None

        if name in chain:
            raise DependencyCycleError(chain[chain.index(name) :] + (name,))

        if task.dependencies:
            path = chain + (name,)
            await run_concurrently(
                (self._run(dep, path) for dep in task.dependencies),
                fail_fast=self.settings.fail_fast,
            )

        return await task.execute()

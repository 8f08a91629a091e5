"""violet: a small dependency-first task runner.

Tasks are declared from a ``violet.py`` file with a fluent builder and run
on a single asyncio event loop.

Example:
    >>> import asyncio
    >>> from violet import TaskRegistry
    >>> registry = TaskRegistry()
    >>> registry.declare("build").dep("clean").exec("make").log("done")
    >>> asyncio.run(registry.run("build"))
"""

from violet.config.settings import VioletSettings
from violet.engine.registry import TaskRegistry
from violet.engine.task import Task, TaskBuilder
from violet.enums import LogLevel, Severity, StderrPolicy

Violet = TaskRegistry

__all__ = [
    "LogLevel",
    "Severity",
    "StderrPolicy",
    "Task",
    "TaskBuilder",
    "TaskRegistry",
    "Violet",
    "VioletSettings",
]

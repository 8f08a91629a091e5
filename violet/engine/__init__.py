"""Task execution engine.

Key Components:
    - TaskRegistry: Declares tasks and runs them dependency-first
    - Task / TaskBuilder: A named action pipeline and its fluent builder
    - Sequential, Parallel, Command, Log: The action kinds
    - ContextSlot: Live context of one task run
    - LogGate: Severity threshold shared by every task of a registry

Example:
    >>> from violet.engine import TaskRegistry
    >>> registry = TaskRegistry()
    >>> registry.declare("hello").log("x").exec("echo", "hi")
    >>> await registry.run("hello")
"""

from violet.engine.actions import Action, Command, Log, Parallel, Sequential, TaskRun
from violet.engine.context import ContextSlot
from violet.engine.log_gate import LogGate
from violet.engine.registry import TaskRegistry
from violet.engine.task import Task, TaskBuilder

__all__ = [
    "Action",
    "Command",
    "ContextSlot",
    "Log",
    "LogGate",
    "Parallel",
    "Sequential",
    "Task",
    "TaskBuilder",
    "TaskRegistry",
    "TaskRun",
]

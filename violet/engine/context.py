"""Execution context threaded through one task's actions.

A context is whatever mapping-like object the task's ``context_factory``
builds (a plain ``dict`` by default). Actions receive the current value and
either return a replacement, which is installed wholesale, or ``None``,
which leaves it untouched. Contexts are never merged or copied.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

Context = Any
ContextFactory = Callable[[], Context]


@dataclass
class ContextSlot:
    """Holds the live context of one task run.

    Attributes:
        current: The context actions will see next
    """

    current: Context = field(default_factory=dict)

    def apply(self, result: Context | None) -> Context:
        """Install ``result`` as the new context unless it is None."""
        if result is not None:
            self.current = result
        return self.current

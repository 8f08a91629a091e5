"""Locating and loading the task-definition file.

A definition file is a Python module named ``violet.py`` (matched
case-insensitively) in the working directory. It declares tasks from a
function, ``define`` by default, that receives the registry:

    def define(violet):
        violet.log_level("warn")
        violet.declare("build").exec("make")
"""

import importlib.util
import inspect
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import structlog

from violet.exceptions import DefinitionError, DefinitionNotFoundError

log = structlog.get_logger(__name__)

SCRIPT_SUFFIX = ".py"


class DefinitionLoader:
    """Finds a definition file and returns its entrypoint.

    Attributes:
        directory: Directory searched for the definition file
        name: Base name of the definition file
        entrypoint: Function called with the registry
    """

    def __init__(
        self,
        directory: Path | str | None = None,
        name: str = "violet",
        entrypoint: str = "define",
    ) -> None:
        self.directory = Path(directory) if directory is not None else Path.cwd()
        self.name = name
        self.entrypoint = entrypoint

    def find(self) -> Path:
        """Return the definition file in ``directory``.

        Raises:
            DefinitionNotFoundError: If no file matches
        """
        target = f"{self.name}{SCRIPT_SUFFIX}".lower()
        try:
            candidates = sorted(p for p in self.directory.iterdir() if p.is_file() and p.name.lower() == target)
        except OSError as e:
            raise DefinitionNotFoundError(f"Cannot read directory {self.directory}") from e

        if not candidates:
            raise DefinitionNotFoundError(f"No {self.name}{SCRIPT_SUFFIX} file found in {self.directory}")
        return candidates[0].resolve()

    def load(self, path: Path | None = None) -> Callable[[Any], Any]:
        """Import the definition file and return its entrypoint.

        Args:
            path: Explicit definition file; searched for when omitted

        Raises:
            DefinitionNotFoundError: If no definition file exists
            DefinitionError: If the file cannot be imported or lacks a
                callable entrypoint
        """
        path = path or self.find()
        if not path.is_file():
            raise DefinitionNotFoundError("Definition file not found", path=str(path))

        module_name = f"_violet_definition_{path.stem.lower()}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise DefinitionError("Cannot load definition file", path=str(path))

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise DefinitionError(f"Failed to import definition file: {e}", path=str(path)) from e

        entry = getattr(module, self.entrypoint, None)
        if not callable(entry):
            raise DefinitionError(f"Definition file has no callable '{self.entrypoint}'", path=str(path))

        log.debug("definition_loaded", path=str(path), entrypoint=self.entrypoint)
        return entry


async def apply_definition(entry: Callable[[Any], Any], registry: Any) -> None:
    """Call a definition entrypoint, awaiting it if it is a coroutine."""
    result = entry(registry)
    if inspect.isawaitable(result):
        await result

"""CLI entry point for the violet task runner."""

import asyncio
import sys
from pathlib import Path

import click
import structlog

from violet.config.settings import VioletSettings
from violet.engine.registry import TaskRegistry
from violet.enums import LogLevel
from violet.exceptions import ConfigurationError, VioletError
from violet.loader import DefinitionLoader, apply_definition
from violet.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.command()
@click.argument("task", required=False)
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a YAML settings file",
)
@click.option(
    "--file",
    "-f",
    "definition_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Definition file to load instead of ./violet.py",
)
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=None,
    help="Log level; overrides the one set by the definition file",
)
@click.option("--list", "list_tasks", is_flag=True, help="List declared tasks and exit")
def cli(
    task: str | None,
    config: str | None,
    definition_file: Path | None,
    log_level: str | None,
    list_tasks: bool,
) -> None:
    """Run TASK, after its dependencies, from the definition file."""
    if not task and not list_tasks:
        return

    try:
        settings = VioletSettings.from_yaml(config) if config else VioletSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    configure_logging(settings.log_level.logging_level, settings.log_format)

    try:
        asyncio.run(_run(settings, task, definition_file, log_level, list_tasks))
    except VioletError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("run_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error("run_unexpected", exc_info=True)
        sys.exit(1)


async def _run(
    settings: VioletSettings,
    task: str | None,
    definition_file: Path | None,
    log_level: str | None,
    list_tasks: bool,
) -> None:
    """Load the definition file, then list or run tasks."""
    loader = DefinitionLoader(
        settings.cwd,
        name=settings.definition_name,
        entrypoint=settings.definition_entrypoint,
    )
    entry = loader.load(definition_file)

    registry = TaskRegistry(settings)
    if log_level:
        registry.gate.pin(log_level)
        configure_logging(registry.gate.level.logging_level, settings.log_format)
    await apply_definition(entry, registry)
    registry.seal()
    configure_logging(registry.gate.level.logging_level, settings.log_format)

    if list_tasks:
        for name in registry.names:
            click.echo(name)
        return

    if task:
        await registry.run(task)


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()

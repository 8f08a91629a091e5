"""
Configuration system using Pydantic for type-safe settings management.

Settings are built once at startup, from defaults, ``VIOLET_*`` environment
variables, or a YAML file, and handed by reference to the task registry.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from violet.enums import LogLevel, StderrPolicy
from violet.exceptions import ConfigurationError


class VioletSettings(BaseSettings):
    """Task runner settings.

    Example:
        >>> settings = VioletSettings(log_level="warn", fail_fast=False)
        >>> settings = VioletSettings.from_yaml("violet.yaml")
    """

    model_config = SettingsConfigDict(
        env_prefix="VIOLET_",
        case_sensitive=False,
    )

    log_level: LogLevel = Field(default=LogLevel.LOG, description="Initial Log Gate threshold")
    log_format: Literal["console", "json"] = Field(default="console", description="Log renderer")
    stderr_policy: StderrPolicy = Field(
        default=StderrPolicy.FAIL,
        description="Whether non-empty stderr fails a command (fail) or is only logged (log)",
    )
    fail_fast: bool = Field(
        default=True,
        description="Cancel sibling dependencies and parallel branches on the first failure",
    )
    command_timeout: float | None = Field(
        default=None, gt=0, description="Seconds before a shell command is killed"
    )
    working_directory: Path | None = Field(
        default=None, description="Directory for shell commands and definition lookup"
    )
    definition_name: str = Field(default="violet", description="Base name of the definition file")
    definition_entrypoint: str = Field(
        default="define", description="Function in the definition file that declares tasks"
    )

    @property
    def cwd(self) -> Path:
        """Effective working directory."""
        return self.working_directory or Path.cwd()

    @classmethod
    def from_yaml(cls, config_path: str) -> VioletSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            VioletSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines are left untouched.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))

"""Configuration for the violet task runner.

Example:
    >>> from violet.config import VioletSettings
    >>> settings = VioletSettings.from_yaml("violet.yaml")
    >>> settings.stderr_policy
"""

from violet.config.settings import VioletSettings

__all__ = ["VioletSettings"]

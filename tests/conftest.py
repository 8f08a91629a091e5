"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
import structlog

from violet.config.settings import VioletSettings
from violet.engine.registry import TaskRegistry


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any configure_logging call made by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> VioletSettings:
    """Default runner settings."""
    return VioletSettings()


@pytest.fixture
def fake_shell() -> AsyncMock:
    """Shell adapter that succeeds silently."""
    return AsyncMock(return_value=("", "", 0))


@pytest.fixture
def registry(settings: VioletSettings) -> TaskRegistry:
    """Registry running commands through the real shell."""
    return TaskRegistry(settings)

"""
Shared pytest fixtures and configuration for kvspine tests.

This module provides:
- Registry, settings and logging cleanup for test isolation
- Fixtures wrapping the driver/logger test doubles
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure kvspine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kvspine.config import reset_settings
from kvspine.drivers import clear_registry
from kvspine.logging import clear_context
from kvspine.logging import config as logging_config
from tests._support.doubles import RecordingLogger, StubDriver


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset global registries, settings and logging around every test."""
    for var in ("KVSPINE_DRIVER", "KVSPINE_NAME", "KVSPINE_LOG", "KVSPINE_LAZY", "KVSPINE_URL"):
        monkeypatch.delenv(var, raising=False)
    clear_registry()
    reset_settings()
    clear_context()
    RecordingLogger.instances.clear()
    yield
    clear_registry()
    reset_settings()
    clear_context()
    RecordingLogger.instances.clear()
    structlog.reset_defaults()
    logging_config._configured = False


# =============================================================================
# Test Doubles
# =============================================================================


@pytest.fixture
def stub_driver() -> StubDriver:
    return StubDriver()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()

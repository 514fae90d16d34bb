"""Pytest configuration and shared fixtures for the scene pipeline tests.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest


# Add project root to path so imports work
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config: pytest.Config) -> None:
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s [%(levelname)s] %(message)s",
    )


@pytest.fixture
def config_path() -> Path:
    """Path to the shipped default configuration."""
    return PROJECT_ROOT / "config" / "default_config.yaml"


@pytest.fixture
def scene_config(config_path: Path):
    """Default configuration loaded from YAML."""
    from render_core.constants import load_config

    return load_config(config_path)

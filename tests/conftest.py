"""
Pytest configuration for the test suite.

This file is automatically loaded by pytest and applies configuration
to all tests in the tests/ directory.
"""

import os

# Visualizer and rendering tests need pygame without a real display
os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')

import pytest

from src.utils.logger import LogLevel, setup_logging


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    # Console-only logging so test runs never write log files
    setup_logging(level=LogLevel.WARNING, file_output=False, force=True)


@pytest.fixture
def small_config():
    """A config with tiny buffers so full-buffer training stays fast."""
    from config import Config
    return Config(MAX_SAMPLES=64, BATCH_SIZE=8, EPOCHS_PER_BURST=2, SEED=1234)

"""Shared fixtures for CLI tests."""

import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def restore_logger():
    """Drop the sinks a CLI run bound to the runner's captured streams."""
    yield
    logger.remove()
    logger.add(sys.stderr)

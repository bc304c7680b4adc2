# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds src to sys.path so `import fleetpulse` works without installation.
"""

import sys
from pathlib import Path

import pytest
from loguru import logger

project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))


@pytest.fixture
def log_records():
    """Collect loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_container():
    from fleetpulse.core.di import Container

    Container.reset()
    yield
    Container.reset()

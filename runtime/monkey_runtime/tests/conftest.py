"""
Pytest configuration and fixtures for monkey_runtime tests.
"""

import io
import os
import sys

import pytest

# Add the runtime directory to path so the package imports without installing
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from monkey_runtime import MonkeyRuntime


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests that really sleep or recurse deeply (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def output():
    """In-memory stream that print/puts write to."""
    return io.StringIO()


@pytest.fixture
def runtime(output):
    """Fresh runtime writing to the output fixture."""
    return MonkeyRuntime(output=output)

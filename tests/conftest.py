"""Pytest configuration.

Run pytest from this project's root; pythonpath in pyproject.toml puts src/
and the project root (for tests.rule_test_utils) on sys.path.
"""

from unittest.mock import MagicMock

import pytest

from prosecheck.infrastructure.di.container import ProsecheckContainer


@pytest.fixture
def telemetry() -> MagicMock:
    return MagicMock()


@pytest.fixture(autouse=True)
def _reset_container() -> None:
    ProsecheckContainer.reset()

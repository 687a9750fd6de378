from __future__ import annotations

import pytest
from fakes import FakeLocator

from log import configure_logging
from rules.config import SqlbindConfig


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    configure_logging(level="WARNING")


@pytest.fixture
def config() -> SqlbindConfig:
    return SqlbindConfig()


@pytest.fixture
def locator() -> FakeLocator:
    return FakeLocator({"users.findById": "SELECT * FROM users WHERE id = :id"})

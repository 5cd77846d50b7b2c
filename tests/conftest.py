import os

# Console-only WARNING logging, no log files, before any app module is imported
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.utils.logging_config import configure_for_environment

configure_for_environment()


def _make_cursor(docs):
    """Stand-in for a motor cursor supporting sort/limit chaining and to_list"""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def make_cursor():
    return _make_cursor


@pytest.fixture
def headers():
    return {"X-User-ID": "user-1"}

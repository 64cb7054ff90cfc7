"""Shared pytest fixtures for WOD Tracker test suites."""

from collections.abc import Generator
from datetime import datetime
from datetime import timezone
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation clock for time-relative constraints."""
    return FIXED_NOW


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide an API test client for contract suites."""
    from wod_tracker.core.config import AppSettings
    from wod_tracker.main import create_app

    with TestClient(create_app(AppSettings(environment="test"))) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    from wod_tracker.core.config import get_app_settings

    get_app_settings.cache_clear()
    yield
    get_app_settings.cache_clear()

"""
Shared pytest configuration and fixtures for restchain tests.

This module provides reusable fixtures for:
- Suite configuration (in memory and on disk)
- An in-memory /users service answering through a patched requests.Session
- ApiClient instances bound to that service
- Settings and logging isolation
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest
import requests
import structlog

from restchain.client import ApiClient
from restchain.core.config import SuiteConfig, get_settings
from tests.fakes import BASE_URL, FakeUsersService

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def suite_config() -> SuiteConfig:
    return SuiteConfig.from_properties({"base.url": BASE_URL, "env": "test"})


@pytest.fixture
def properties_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.properties"
    path.write_text(f"# test environment\nbase.url={BASE_URL}\nenv=test\n", encoding="utf-8")
    return path


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def users_service() -> FakeUsersService:
    return FakeUsersService()


@pytest.fixture
def fake_session(users_service: FakeUsersService, monkeypatch) -> requests.Session:
    session = requests.Session()
    monkeypatch.setattr(session, "request", users_service.handle)
    yield session
    session.close()


@pytest.fixture
def api_client(suite_config: SuiteConfig, fake_session: requests.Session) -> ApiClient:
    return ApiClient(suite_config, session=fake_session, timeout=5)


@pytest.fixture
def patch_requests(users_service: FakeUsersService, monkeypatch) -> FakeUsersService:
    """Route every requests.Session in the process to the fake service."""

    def _request(self, method, url, **kwargs):
        return users_service.handle(method, url, **kwargs)

    monkeypatch.setattr(requests.Session, "request", _request)
    return users_service


# ============================================================================
# Pytest Hooks & Isolation
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "smoke: mark test as a smoke test (requires a running users service)")


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch):
    """Drop RESTCHAIN_* overrides from the environment and the settings cache."""
    for key in [name for name in os.environ if name.startswith("RESTCHAIN_")]:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset structlog's logger cache and root handlers between tests."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    structlog.reset_defaults()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)

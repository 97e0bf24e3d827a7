"""
tests/conftest.py -- Shared test fixtures for the Flapper test suite.

This module provides:
  - settings: Settings with zero workflow delays and polling disabled
  - executor_client / inventory_client: MagicMock stand-ins for the relay
  - session: a DashboardSession wired to the mocks
  - _patch_lifespan(): installs that session on app.state, bypassing real startup
  - api_client: TestClient for API integration tests
  - web_client: TestClient with follow_redirects=False for web route tests

Design: every fixture is function-scoped. The session holds mutable state
(applied mitigations, the activity log, dry-run), so sharing one across tests
would make results depend on test order.

The TestClient is always entered with `with` so the lifespan runs and one
event loop lives for the whole test. Apply workflows scheduled by one request
keep running on that loop between requests.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from asgi import app
from core.config import Settings
from core.education import EducationProvider
from core.session import DashboardSession

SAMPLE_INVENTORY = {
    "ports": [
        {"port": 445, "name": "SMB", "protocol": "TCP", "status": "OPEN", "risk": "CRITICAL"},
        {"port": 5353, "name": "mDNS", "protocol": "UDP", "status": "OPEN", "risk": "LOW"},
        {"port": 22, "name": "SSH", "protocol": "TCP", "status": "FILTERED", "risk": "MEDIUM"},
    ],
    "software": [{"name": "7-Zip", "version": "23.01"}],
}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        executor_url="http://relay.test:3001",
        validate_delay=0,
        commit_delay=0,
        inventory_poll_seconds=0,
        gemini_api_key="",
    )


@pytest.fixture
def executor_client() -> MagicMock:
    client = MagicMock()
    client.run_hardening.return_value = {"mode": "audit", "stdout": "What if: 5 changes", "stderr": ""}
    return client


@pytest.fixture
def inventory_client() -> MagicMock:
    client = MagicMock()
    client.fetch_inventory.return_value = SAMPLE_INVENTORY
    return client


@pytest.fixture
def session(settings, executor_client, inventory_client) -> DashboardSession:
    return DashboardSession(
        settings,
        executor_client=executor_client,
        inventory_client=inventory_client,
        education=EducationProvider(api_key=""),
    )


def _patch_lifespan(session: DashboardSession):
    """Return an async context manager that replaces the real lifespan.

    Installs the pre-built test session so routes hit mocked remotes instead
    of a relay on localhost:3001.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.session = session
        await session.start()
        yield
        await session.stop()

    return test_lifespan


@pytest.fixture
def api_client(session) -> Generator[TestClient, None, None]:
    """Yield a TestClient for API integration tests.

    The rate limiter's in-memory counters are reset so limits hit in one test
    never leak into the next.
    """
    limiter.reset()
    app.router.lifespan_context = _patch_lifespan(session)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def web_client(session) -> Generator[TestClient, None, None]:
    """Yield a TestClient for web route integration tests.

    follow_redirects=False is essential for web route tests: we assert on
    redirect *locations* (303 back to the page), which are invisible once
    the client follows the redirect and returns the final 200 response.
    """
    limiter.reset()
    app.router.lifespan_context = _patch_lifespan(session)

    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client

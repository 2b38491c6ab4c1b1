"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app (with lifespan) and HTTP client
    - Realtime Fixtures: registry, token validator, session manager, publisher
    - Authentication Fixtures: user token factory
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Callable
import os

from httpx import ASGITransport, AsyncClient
import pytest

# Tests never read a developer's .env or start optional surfaces implicitly
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("LOG_JSON_LOGS", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from hrchat_service.core.settings import AppSettings, PubSubSettings, clear_all_caches  # noqa: E402
from hrchat_service.infra.auth.tokens import Base64TokenValidator, encode_user_token  # noqa: E402
from hrchat_service.infra.realtime import (  # noqa: E402
    ChannelRegistry,
    InstrumentedPublisher,
    Publisher,
    SessionManager,
)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings so environment changes in one test never leak."""
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Authentication Fixtures
# ============================================================================


@pytest.fixture
def make_token() -> Callable[[int | str], str]:
    """Factory for platform user tokens.

    Example:
        def test_open(manager, make_token):
            session = manager.open(make_token(42), "message-received")
    """

    def _make(user_id: int | str) -> str:
        return encode_user_token(user_id, "2025-01-01T00:00:00Z")

    return _make


# ============================================================================
# Realtime Fixtures
# ============================================================================


@pytest.fixture
def registry() -> ChannelRegistry:
    return ChannelRegistry()


@pytest.fixture
def manager(registry: ChannelRegistry) -> SessionManager:
    """Session manager with the production token format and default capacity."""
    return SessionManager(registry, Base64TokenValidator(), queue_capacity=100)


@pytest.fixture
def publisher(registry: ChannelRegistry) -> InstrumentedPublisher:
    return InstrumentedPublisher(Publisher(registry))


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            msg = "condition not met before timeout"
            raise AssertionError(msg)
        await asyncio.sleep(0.005)


@pytest.fixture
def wait_until():
    """Yield to the event loop until a predicate holds.

    Example:
        await wait_until(lambda: session.delivered == 1)
    """
    return _wait_until


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(environment="test", debug=True)


@pytest.fixture
def pubsub_settings() -> PubSubSettings:
    return PubSubSettings(queue_capacity=10)


@pytest.fixture
async def app(app_settings, pubsub_settings):
    """FastAPI application with its lifespan running.

    httpx's ASGITransport does not send lifespan events, so the fixture
    enters the lifespan itself; the realtime core is on ``app.state``.
    """
    from hrchat_service.app.main import create_app

    application = create_app(app_settings=app_settings, pubsub_settings=pubsub_settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the app.

    Example:
        async def test_health_check(client):
            response = await client.get("/api/v1/health")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

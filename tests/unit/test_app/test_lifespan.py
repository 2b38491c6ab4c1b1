"""Tests for application startup and shutdown."""

from __future__ import annotations

from fastapi import FastAPI
import pytest

from hrchat_service.app.lifespan import init_realtime, shutdown_realtime
from hrchat_service.app.main import create_app
from hrchat_service.core.settings import AppSettings, AuthSettings, PubSubSettings
from hrchat_service.infra.realtime import InstrumentedPublisher, SessionState, TopicKind


@pytest.mark.unit
class TestRealtimeLifecycle:
    """Tests for init_realtime() and shutdown_realtime()."""

    @pytest.mark.asyncio
    async def test_init_attaches_core_to_state(self):
        app = FastAPI()

        manager = init_realtime(
            app,
            PubSubSettings(queue_capacity=5, max_sessions_per_user=2),
            AuthSettings(static_tokens={"dev": "1"}),
        )

        assert app.state.session_manager is manager
        assert isinstance(app.state.publisher, InstrumentedPublisher)
        session = manager.open("dev", TopicKind.MESSAGE_RECEIVED)
        assert session.dispatcher.capacity == 5
        assert app.state.registry.subscribers_of("message_received_1") == (session,)

    @pytest.mark.asyncio
    async def test_shutdown_closes_sessions_and_detaches(self, make_token):
        app = FastAPI()
        manager = init_realtime(app, PubSubSettings(), AuthSettings())
        session = manager.open(make_token(3), TopicKind.CHAT_LIST_UPDATED)

        await shutdown_realtime(app, timeout=1)

        assert session.state is SessionState.CLOSED
        assert session.close_reason == "shutdown"
        assert app.state.session_manager is None
        assert app.state.publisher is None

    @pytest.mark.asyncio
    async def test_shutdown_without_startup_is_noop(self):
        await shutdown_realtime(FastAPI())

    @pytest.mark.asyncio
    async def test_lifespan_uses_factory_overrides(self):
        app = create_app(
            app_settings=AppSettings(environment="test"),
            pubsub_settings=PubSubSettings(queue_capacity=3),
        )

        async with app.router.lifespan_context(app):
            manager = app.state.session_manager
            assert manager is not None
            assert manager._queue_capacity == 3

        assert app.state.session_manager is None

    @pytest.mark.asyncio
    async def test_apps_do_not_share_subscribers(self, make_token):
        first, second = FastAPI(), FastAPI()
        init_realtime(first, PubSubSettings(), AuthSettings())
        init_realtime(second, PubSubSettings(), AuthSettings())

        first.state.session_manager.open(make_token(1), TopicKind.MESSAGE_RECEIVED)
        result = await second.state.publisher.publish("message_received_1", {})

        assert result.subscribers == 0

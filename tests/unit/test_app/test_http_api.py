"""Tests for the HTTP surface: health, metrics, stats and debug publish."""

from __future__ import annotations

from httpx import ASGITransport, AsyncClient
import pytest

from hrchat_service.app.main import create_app
from hrchat_service.core.settings import AppSettings, GraphQLSettings
from hrchat_service.infra.realtime import TopicKind


@pytest.mark.unit
class TestHealth:
    """Tests for /api/v1/health."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "hrchat-service"
        assert data["active_sessions"] == 0

    @pytest.mark.asyncio
    async def test_live_and_ready(self, client):
        assert (await client.get("/api/v1/health/live")).status_code == 200
        response = await client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    @pytest.mark.asyncio
    async def test_not_ready_before_startup(self):
        app = create_app(app_settings=AppSettings(environment="test"))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            health = await ac.get("/api/v1/health")
            ready = await ac.get("/api/v1/health/ready")
            stats = await ac.get("/api/v1/realtime/stats")

        assert health.status_code == 503
        assert health.json()["status"] == "unhealthy"
        assert ready.status_code == 503
        assert stats.status_code == 503
        assert stats.headers["content-type"] == "application/problem+json"
        assert stats.json()["type"] == "realtime-unavailable"


@pytest.mark.unit
class TestMetrics:
    """Tests for /metrics."""

    @pytest.mark.asyncio
    async def test_exposes_pubsub_metrics(self, client):
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "pubsub_active_sessions" in response.text
        assert 'application_info{environment="test"' in response.text


@pytest.mark.unit
class TestStats:
    """Tests for GET /api/v1/realtime/stats."""

    @pytest.mark.asyncio
    async def test_reports_live_sessions(self, app, client, make_token):
        manager = app.state.session_manager
        manager.open(make_token(42), TopicKind.MESSAGE_RECEIVED)
        manager.open(make_token(42), TopicKind.CHAT_LIST_UPDATED)

        response = await client.get("/api/v1/realtime/stats")

        assert response.status_code == 200
        assert response.json() == {
            "active_sessions": 2,
            "topics": 2,
            "lossy_sessions": 0,
            "dropped_events": 0,
            "sessions_by_kind": {"message-received": 1, "chat-list-updated": 1},
        }


@pytest.mark.unit
class TestDebugPublish:
    """Tests for POST /api/v1/realtime/publish."""

    @pytest.mark.asyncio
    async def test_publish_wraps_payload(self, app, client, make_token):
        session = app.state.session_manager.open(make_token(42), TopicKind.MESSAGE_RECEIVED)

        response = await client.post(
            "/api/v1/realtime/publish",
            json={"kind": "message-received", "subject_id": 42, "payload": {"id": 7}},
        )

        assert response.status_code == 200
        assert response.json() == {
            "topic": "message_received_42",
            "subscribers": 1,
            "accepted": 1,
            "dropped": 0,
            "failed": 0,
        }
        events = session.dispatcher.events()
        assert await anext(events) == {"messageReceived": {"id": 7}}
        await events.aclose()

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self, client):
        response = await client.post(
            "/api/v1/realtime/publish",
            json={"kind": "chat-list-updated", "subject_id": "5", "payload": {}, "wrap": False},
        )

        assert response.status_code == 200
        assert response.json()["topic"] == "user_chats_updated_5"
        assert response.json()["subscribers"] == 0

    @pytest.mark.asyncio
    async def test_unknown_kind_is_rejected(self, client):
        response = await client.post(
            "/api/v1/realtime/publish",
            json={"kind": "typing", "subject_id": "5"},
        )

        assert response.status_code == 422
        assert response.headers["content-type"] == "application/problem+json"
        assert response.json()["type"] == "validation-error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("app_settings", [AppSettings(environment="test", debug=False)])
    async def test_forbidden_outside_debug(self, client):
        response = await client.post(
            "/api/v1/realtime/publish",
            json={"kind": "message-received", "subject_id": "1"},
        )

        assert response.status_code == 403
        assert response.json()["type"] == "debug-only"


@pytest.mark.unit
class TestDebugNotifyMessage:
    """Tests for POST /api/v1/realtime/notify/message."""

    @pytest.mark.asyncio
    async def test_fans_out_to_recipients_except_sender(self, app, client, make_token):
        manager = app.state.session_manager
        sender = manager.open(make_token(1), TopicKind.MESSAGE_RECEIVED)
        recipient = manager.open(make_token(2), TopicKind.MESSAGE_RECEIVED)
        message = {"id": 7, "chat_id": 3, "sender_id": 1, "content": "hi"}

        response = await client.post(
            "/api/v1/realtime/notify/message",
            json={"recipients": [{"id": 1}, {"id": 2}, 3], "message": message},
        )

        assert response.status_code == 200
        assert response.json() == {
            "topics": ["message_received_2", "message_received_3"],
            "accepted": 1,
        }
        assert sender.dispatcher.pending == 0
        events = recipient.dispatcher.events()
        assert await anext(events) == {"messageReceived": message}
        await events.aclose()

    @pytest.mark.asyncio
    async def test_empty_recipients_rejected(self, client):
        response = await client.post(
            "/api/v1/realtime/notify/message",
            json={"recipients": [], "message": {"id": 1}},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize("app_settings", [AppSettings(environment="test", debug=False)])
    async def test_forbidden_outside_debug(self, client):
        response = await client.post(
            "/api/v1/realtime/notify/message",
            json={"recipients": [2], "message": {"id": 1, "sender_id": 1}},
        )

        assert response.status_code == 403
        assert response.json()["type"] == "debug-only"


@pytest.mark.unit
class TestDependencies:
    """Tests for realtime FastAPI dependencies."""

    @pytest.mark.asyncio
    async def test_chat_notifier_uses_app_publisher(self, app):
        from unittest.mock import MagicMock

        from hrchat_service.core.dependencies import get_chat_notifier, get_publisher

        connection = MagicMock()
        connection.app = app
        publisher = get_publisher(connection)
        notifier = get_chat_notifier(publisher)

        summary = await notifier.user_chats_updated(5, [{"id": 1}])
        assert summary.topics == ["user_chats_updated_5"]
        assert publisher is app.state.publisher


@pytest.mark.unit
def test_graphql_can_be_disabled():
    app = create_app(
        app_settings=AppSettings(environment="test"),
        graphql_settings=GraphQLSettings(enabled=False),
    )
    paths = {getattr(route, "path", None) for route in app.routes}

    assert "/gql-point" not in paths
    assert "/ws/events" in paths

"""Tests for the plain WebSocket event stream at /ws/events."""

from __future__ import annotations

from urllib.parse import urlencode

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from hrchat_service.app.main import create_app
from hrchat_service.core.settings import AppSettings, AuthSettings, PubSubSettings
from hrchat_service.features.realtime.router import parse_kinds
from hrchat_service.infra.realtime import TopicKind


@pytest.fixture
def ws_client():
    """TestClient with the lifespan running (needed for WebSocket tests)."""
    app = create_app(
        app_settings=AppSettings(environment="test", debug=True),
        pubsub_settings=PubSubSettings(queue_capacity=10, max_sessions_per_user=3),
        auth_settings=AuthSettings(static_tokens={"dev-token": "42"}),
    )
    with TestClient(app) as client:
        yield client


def events_url(token: str | None = None, kinds: str | None = None) -> str:
    params = {k: v for k, v in (("token", token), ("kinds", kinds)) if v is not None}
    return f"/ws/events?{urlencode(params)}" if params else "/ws/events"


def publish(client: TestClient, kind: str, subject_id: str, payload: dict) -> dict:
    response = client.post(
        "/api/v1/realtime/publish",
        json={"kind": kind, "subject_id": subject_id, "payload": payload},
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.unit
class TestEventStream:
    """Tests for the WS /ws/events endpoint."""

    def test_connected_frame_lists_topics(self, ws_client, make_token):
        with ws_client.websocket_connect(events_url(make_token(42))) as ws:
            frame = ws.receive_json()

        assert frame["type"] == "connected"
        assert frame["subject_id"] == "42"
        assert frame["topics"] == [
            "message_received_42",
            "message_status_changed_42",
            "user_chats_updated_42",
        ]

    def test_receives_published_event(self, ws_client, make_token):
        url = events_url(make_token(42), "message-received")
        with ws_client.websocket_connect(url) as ws:
            assert ws.receive_json()["topics"] == ["message_received_42"]

            result = publish(ws_client, "message-received", "42", {"id": 7})
            frame = ws.receive_json()

        assert result["accepted"] == 1
        assert frame == {
            "type": "event",
            "topic": "message_received_42",
            "data": {"messageReceived": {"id": 7}},
        }

    def test_events_arrive_in_publish_order(self, ws_client, make_token):
        url = events_url(make_token(42), "chat-list-updated")
        with ws_client.websocket_connect(url) as ws:
            ws.receive_json()
            for n in range(5):
                publish(ws_client, "chat-list-updated", "42", {"id": n})
            frames = [ws.receive_json() for _ in range(5)]

        assert [f["data"]["userChatsUpdated"]["id"] for f in frames] == [0, 1, 2, 3, 4]

    def test_other_users_events_are_not_delivered(self, ws_client, make_token):
        url = events_url(make_token(42), "message-received")
        with ws_client.websocket_connect(url) as ws:
            ws.receive_json()
            assert publish(ws_client, "message-received", "43", {"id": 1})["subscribers"] == 0
            publish(ws_client, "message-received", "42", {"id": 2})
            frame = ws.receive_json()

        assert frame["data"] == {"messageReceived": {"id": 2}}

    def test_ping_pong(self, ws_client, make_token):
        with ws_client.websocket_connect(events_url(make_token(1))) as ws:
            ws.receive_json()
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_binary_frames_are_ignored(self, ws_client, make_token):
        url = events_url(make_token(42), "message-received")
        with ws_client.websocket_connect(url) as ws:
            ws.receive_json()
            ws.send_bytes(b"\x00\x01")
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

            publish(ws_client, "message-received", "42", {"id": 3})
            assert ws.receive_json()["data"] == {"messageReceived": {"id": 3}}

        stats = ws_client.get("/api/v1/realtime/stats").json()
        assert stats["active_sessions"] == 0

    def test_authorization_header(self, ws_client):
        headers = {"Authorization": "Bearer dev-token"}
        with ws_client.websocket_connect(events_url(kinds="message-received"), headers=headers) as ws:
            assert ws.receive_json()["subject_id"] == "42"

    def test_disconnect_removes_sessions(self, ws_client, make_token):
        with ws_client.websocket_connect(events_url(make_token(42))) as ws:
            ws.receive_json()
            assert ws_client.get("/api/v1/realtime/stats").json()["active_sessions"] == 3

        result = publish(ws_client, "message-received", "42", {"id": 1})
        assert result["subscribers"] == 0

    def test_invalid_token_is_policy_violation(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect(events_url("not-a-token")) as ws:
                ws.receive_json()

        assert exc_info.value.code == 1008
        assert ws_client.get("/api/v1/realtime/stats").json()["active_sessions"] == 0

    def test_missing_token_is_policy_violation(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect("/ws/events") as ws:
                ws.receive_json()

        assert exc_info.value.code == 1008

    def test_unknown_kind_is_policy_violation(self, ws_client, make_token):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect(events_url(make_token(1), "typing")) as ws:
                ws.receive_json()

        assert exc_info.value.code == 1008

    def test_session_limit_is_try_again_later(self, ws_client, make_token):
        token = make_token(42)
        with ws_client.websocket_connect(events_url(token)) as first:
            first.receive_json()
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with ws_client.websocket_connect(events_url(token)) as second:
                    second.receive_json()

        assert exc_info.value.code == 1013
        assert ws_client.get("/api/v1/realtime/stats").json()["active_sessions"] == 0


@pytest.mark.unit
class TestParseKinds:
    """Tests for parse_kinds()."""

    def test_empty_means_all(self):
        assert parse_kinds("") == list(TopicKind)

    def test_deduplicates_and_accepts_prefixes(self):
        assert parse_kinds("message-received, message_received,user_chats_updated") == [
            TopicKind.MESSAGE_RECEIVED,
            TopicKind.CHAT_LIST_UPDATED,
        ]

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            parse_kinds("message-received,typing")

"""Tests for chat event producers."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from hrchat_service.features.chat import ChatNotifier
from hrchat_service.infra.realtime import Publisher, PublishResult, TopicKind


def published(publisher: AsyncMock) -> list[tuple[str, dict]]:
    return [(c.args[0], c.args[1]) for c in publisher.publish.await_args_list]


@pytest.fixture
def mock_publisher() -> AsyncMock:
    publisher = AsyncMock()
    publisher.publish.side_effect = lambda topic, payload: PublishResult(topic=topic)
    return publisher


MESSAGE = {"id": 7, "chat_id": 3, "sender_id": 1, "content": "hi"}


@pytest.mark.unit
class TestMessageReceived:
    """Tests for ChatNotifier.message_received()."""

    @pytest.mark.asyncio
    async def test_notifies_everyone_but_sender(self, mock_publisher):
        summary = await ChatNotifier(mock_publisher).message_received(
            [{"id": 1}, {"id": 2}, {"id": 3}],
            MESSAGE,
        )

        assert published(mock_publisher) == [
            ("message_received_2", {"messageReceived": MESSAGE}),
            ("message_received_3", {"messageReceived": MESSAGE}),
        ]
        assert summary.published == 2
        assert summary.topics == ["message_received_2", "message_received_3"]

    @pytest.mark.asyncio
    async def test_explicit_sender(self, mock_publisher):
        await ChatNotifier(mock_publisher).message_received([1, 2], MESSAGE, sender_id=2)
        assert [topic for topic, _ in published(mock_publisher)] == ["message_received_1"]


@pytest.mark.unit
class TestMessageStatus:
    """Tests for status change and seen notifications."""

    @pytest.mark.asyncio
    async def test_status_change_reaches_sender_too(self, mock_publisher):
        await ChatNotifier(mock_publisher).message_status_changed([1, 2], MESSAGE)

        assert published(mock_publisher) == [
            ("message_status_changed_1", {"messageStatusChanged": MESSAGE}),
            ("message_status_changed_2", {"messageStatusChanged": MESSAGE}),
        ]

    @pytest.mark.asyncio
    async def test_seen_echoes_message_to_sender(self, mock_publisher):
        seen = {**MESSAGE, "status": "seen"}

        summary = await ChatNotifier(mock_publisher).message_seen([{"id": 1}, {"id": 2}], seen)

        assert [topic for topic, _ in published(mock_publisher)] == [
            "message_status_changed_1",
            "message_status_changed_2",
            "message_received_1",
        ]
        assert published(mock_publisher)[-1][1] == {"messageReceived": seen}
        assert summary.published == 3


@pytest.mark.unit
class TestUserChatsUpdated:
    """Tests for ChatNotifier.user_chats_updated()."""

    @pytest.mark.asyncio
    async def test_one_event_per_chat(self, mock_publisher):
        chats = [
            {"id": 1, "participants": json.dumps([{"id": 5}])},
            {"id": 2, "participants": []},
        ]

        summary = await ChatNotifier(mock_publisher).user_chats_updated(5, chats)

        assert published(mock_publisher) == [
            ("user_chats_updated_5", {"userChatsUpdated": {"id": 1, "participants": [{"id": 5}]}}),
            ("user_chats_updated_5", {"userChatsUpdated": {"id": 2, "participants": []}}),
        ]
        assert summary.published == 2

    @pytest.mark.asyncio
    async def test_no_chats_publishes_nothing(self, mock_publisher):
        summary = await ChatNotifier(mock_publisher).user_chats_updated(5, [])
        assert summary.published == 0
        mock_publisher.publish.assert_not_awaited()


@pytest.mark.unit
class TestEndToEnd:
    """Notifier wired to a real publisher and session."""

    @pytest.mark.asyncio
    async def test_recipient_session_receives_message(self, manager, registry, make_token):
        session = manager.open(make_token(42), TopicKind.MESSAGE_RECEIVED)

        summary = await ChatNotifier(Publisher(registry)).message_received(
            [{"id": 1}, {"id": 42}],
            {"id": 7, "sender_id": 1},
        )

        assert summary.accepted == 1
        events = session.dispatcher.events()
        assert await anext(events) == {"messageReceived": {"id": 7, "sender_id": 1}}
        await events.aclose()

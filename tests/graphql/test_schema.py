"""Tests for the GraphQL schema and query resolvers."""

from __future__ import annotations

import re

import pytest
from strawberry.printer import print_schema

from hrchat_service.features.graphql.context import GraphQLContext
from hrchat_service.features.graphql.schema import create_schema, schema
from hrchat_service.features.graphql.types import ChatType, MessageType
from hrchat_service.infra.realtime import TopicKind

PUBSUB_STATS_QUERY = """
    query {
        pubsubStats {
            active_sessions
            topics
            lossy_sessions
            dropped_events
            sessions_by_kind { kind sessions }
        }
    }
"""

TOPIC_FOR_QUERY = """
    query TopicFor($kind: TopicKind!, $subjectId: ID!) {
        topicFor(kind: $kind, subjectId: $subjectId)
    }
"""


@pytest.fixture
def graphql_context(manager, publisher) -> GraphQLContext:
    return GraphQLContext(session_manager=manager, publisher=publisher)


@pytest.mark.graphql
class TestSchemaShape:
    """Tests for the exported SDL."""

    def test_root_types(self):
        sdl = print_schema(schema)
        assert "type Query {" in sdl
        assert "type Subscription {" in sdl
        assert "type Mutation" not in sdl

    def test_subscription_fields_take_user_token(self):
        sdl = print_schema(schema)
        for field in ("messageReceived", "messageStatusChanged", "userChatsUpdated"):
            assert f"{field}(userToken: String" in sdl

    @pytest.mark.parametrize(
        ("field", "type_name"),
        [
            ("messageReceived", "Message"),
            ("messageStatusChanged", "Message"),
            ("userChatsUpdated", "Chat"),
        ],
    )
    def test_subscription_results_are_non_null(self, field, type_name):
        sdl = print_schema(schema)
        assert re.search(rf"{field}\([^)]*\): {type_name}!", sdl)

    def test_business_types_keep_column_names(self):
        sdl = print_schema(schema)
        assert "type Message {" in sdl
        assert "chat_id: ID!" in sdl
        assert "read_by: [MessageRead]" in sdl
        assert "other_participant: ChatParticipant" in sdl
        assert "enum TopicKind" in sdl


@pytest.mark.graphql
class TestQueries:
    """Tests for Query resolvers."""

    @pytest.mark.asyncio
    async def test_pubsub_stats(self, graphql_context, manager, make_token):
        manager.open(make_token(1), TopicKind.MESSAGE_RECEIVED)
        manager.open(make_token(2), TopicKind.MESSAGE_RECEIVED)

        result = await schema.execute(PUBSUB_STATS_QUERY, context_value=graphql_context)

        assert result.errors is None
        assert result.data["pubsubStats"] == {
            "active_sessions": 2,
            "topics": 2,
            "lossy_sessions": 0,
            "dropped_events": 0,
            "sessions_by_kind": [{"kind": "message-received", "sessions": 2}],
        }

    @pytest.mark.asyncio
    async def test_topic_for(self, graphql_context):
        result = await schema.execute(
            TOPIC_FOR_QUERY,
            variable_values={"kind": "CHAT_LIST_UPDATED", "subjectId": "42"},
            context_value=graphql_context,
        )

        assert result.errors is None
        assert result.data == {"topicFor": "user_chats_updated_42"}

    @pytest.mark.asyncio
    async def test_topic_for_rejects_blank_subject(self, graphql_context):
        result = await schema.execute(
            TOPIC_FOR_QUERY,
            variable_values={"kind": "MESSAGE_RECEIVED", "subjectId": " "},
            context_value=graphql_context,
        )

        assert result.errors is not None
        assert "must not be empty" in result.errors[0].message

    @pytest.mark.asyncio
    async def test_introspection_can_be_disabled(self, graphql_context):
        query = "query { __schema { queryType { name } } }"

        allowed = await create_schema(introspection_enabled=True).execute(
            query, context_value=graphql_context,
        )
        blocked = await create_schema(introspection_enabled=False).execute(
            query, context_value=graphql_context,
        )

        assert allowed.errors is None
        assert blocked.errors is not None


@pytest.mark.graphql
class TestPayloadTypes:
    """Tests for building GraphQL objects from event payloads."""

    def test_message_defaults_and_nesting(self):
        message = MessageType.from_payload(
            {
                "id": 7,
                "chat_id": 3,
                "sender_id": 1,
                "content": "hi",
                "created_at": "2025-01-01T00:00:00Z",
                "sender": {"id": 1, "name": "Alice"},
                "read_by": [{"user_id": 2, "read_at": "2025-01-01T00:01:00Z"}, "junk"],
            },
        )

        assert message.id == "7"
        assert message.media_type == "text"
        assert message.status == "sent"
        assert message.sender.name == "Alice"
        assert [r.user_id for r in message.read_by] == ["2"]
        assert message.chat is None

    def test_chat_decodes_json_columns(self):
        chat = ChatType.from_payload(
            {
                "id": 10,
                "type": "group",
                "participants": '[{"id": 1, "name": "Alice"}, {"id": 2}]',
                "last_message": '{"id": 99, "sender_id": 2, "created_at": "x"}',
                "other_participant": "not json",
                "unread_count": "3",
            },
        )

        assert [p.id for p in chat.participants] == ["1", "2"]
        assert chat.last_message.id == "99"
        assert chat.other_participant is None
        assert chat.unread_count == 3
        assert chat.is_active is True

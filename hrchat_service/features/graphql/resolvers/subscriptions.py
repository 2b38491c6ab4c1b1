"""Subscription resolvers for real-time chat updates.

Provides WebSocket subscriptions for:
- messageReceived: New messages addressed to the subscriber
- messageStatusChanged: Delivery/read status changes of messages the subscriber takes part in
- userChatsUpdated: Changes to the subscriber's chat list

Every subscription authenticates its user token when it starts. The token
comes from the ``userToken`` argument or, when that is absent, from the
WebSocket connection params. Each subscription owns one session on the
subscriber's topic for its whole lifetime; completing the operation or
dropping the socket closes it.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from contextlib import aclosing
import logging
from typing import Annotated, Any

import strawberry
from strawberry.types import Info

from hrchat_service.features.graphql.context import GraphQLContext
from hrchat_service.features.graphql.types.chat import ChatType, MessageType
from hrchat_service.infra.realtime.topics import TopicKind

logger = logging.getLogger(__name__)

UserTokenArg = Annotated[
    str | None,
    strawberry.argument(
        name="userToken",
        description="User token; defaults to the WebSocket connection params",
    ),
]


async def _payloads(
    info: Info[GraphQLContext, None],
    kind: TopicKind,
    user_token: str | None,
) -> AsyncGenerator[Mapping[str, Any], None]:
    """Stream the event bodies published to the subscriber's ``kind`` topic.

    Raises:
        AuthError: The token is missing or invalid. Raised before the first
            event, so the subscription itself fails.
    """
    context = info.context
    credential = user_token or context.credential_from_connection()

    async with aclosing(context.session_manager.stream(credential, kind)) as stream:
        async for payload in stream:
            body = payload.get(kind.payload_key) if isinstance(payload, Mapping) else None
            if not isinstance(body, Mapping):
                logger.warning(
                    "Skipping event without a %s body",
                    kind.payload_key,
                    extra={"kind": kind.value},
                )
                continue
            yield body


@strawberry.type(description="Root subscription type")
class Subscription:
    """GraphQL Subscription resolvers."""

    @strawberry.subscription(name="messageReceived", description="New messages for the subscriber")
    async def message_received(
        self,
        info: Info[GraphQLContext, None],
        user_token: UserTokenArg = None,
    ) -> AsyncGenerator[MessageType, None]:
        async for body in _payloads(info, TopicKind.MESSAGE_RECEIVED, user_token):
            yield MessageType.from_payload(body)

    @strawberry.subscription(
        name="messageStatusChanged",
        description="Status changes (delivered, seen) of the subscriber's messages",
    )
    async def message_status_changed(
        self,
        info: Info[GraphQLContext, None],
        user_token: UserTokenArg = None,
    ) -> AsyncGenerator[MessageType, None]:
        async for body in _payloads(info, TopicKind.MESSAGE_STATUS_CHANGED, user_token):
            yield MessageType.from_payload(body)

    @strawberry.subscription(
        name="userChatsUpdated",
        description="Chats of the subscriber that changed; one event per chat",
    )
    async def user_chats_updated(
        self,
        info: Info[GraphQLContext, None],
        user_token: UserTokenArg = None,
    ) -> AsyncGenerator[ChatType, None]:
        async for body in _payloads(info, TopicKind.CHAT_LIST_UPDATED, user_token):
            yield ChatType.from_payload(body)


__all__ = ["Subscription"]

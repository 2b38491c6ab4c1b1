"""Query resolvers for the GraphQL API.

Provides read operations on the fan-out core:
- pubsubStats: Live session and topic counts
- topicFor(kind, subjectId): The topic a producer must publish to
"""

from __future__ import annotations

from typing import Annotated

import strawberry
from strawberry.types import Info

from hrchat_service.core.exceptions import ValidationException
from hrchat_service.features.graphql.context import GraphQLContext
from hrchat_service.features.graphql.types.pubsub import PubSubStatsType, TopicKindEnum
from hrchat_service.infra.realtime.topics import topic_for as build_topic

SubjectIdArg = Annotated[
    strawberry.ID,
    strawberry.argument(name="subjectId", description="User id the topic is addressed to"),
]


@strawberry.type(description="Root query type")
class Query:
    """GraphQL Query resolvers."""

    @strawberry.field(name="pubsubStats", description="Live subscription statistics")
    def pubsub_stats(self, info: Info[GraphQLContext, None]) -> PubSubStatsType:
        return PubSubStatsType.from_stats(info.context.session_manager.stats())

    @strawberry.field(name="topicFor", description="Topic for an event kind and user id")
    def topic_for(self, kind: TopicKindEnum, subject_id: SubjectIdArg) -> str:
        try:
            return build_topic(kind, subject_id)
        except ValueError as e:
            raise ValidationException(str(e), extra={"subject_id": subject_id}) from e


__all__ = ["Query"]

"""GraphQL types describing the fan-out core itself."""

from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from hrchat_service.infra.realtime.topics import TopicKind

if TYPE_CHECKING:
    from hrchat_service.infra.realtime.manager import SessionStats

TopicKindEnum = strawberry.enum(
    TopicKind,
    name="TopicKind",
    description="Event kinds a client can subscribe to",
)


@strawberry.type(name="SessionsByKind", description="Live session count for one event kind")
class SessionsByKindType:
    kind: str
    sessions: int


@strawberry.type(name="PubSubStats", description="Point-in-time view of live subscriptions")
class PubSubStatsType:
    active_sessions: int = strawberry.field(description="Sessions currently registered")
    topics: int = strawberry.field(description="Topics with at least one subscriber")
    lossy_sessions: int = strawberry.field(description="Sessions that dropped events on overflow")
    dropped_events: int = strawberry.field(description="Events dropped across live sessions")
    sessions_by_kind: list[SessionsByKindType] = strawberry.field(
        description="Live sessions per event kind",
    )

    @classmethod
    def from_stats(cls, stats: SessionStats) -> PubSubStatsType:
        return cls(
            active_sessions=stats.active_sessions,
            topics=stats.topics,
            lossy_sessions=stats.lossy_sessions,
            dropped_events=stats.dropped_events,
            sessions_by_kind=[
                SessionsByKindType(kind=kind, sessions=count)
                for kind, count in sorted(stats.sessions_by_kind.items())
            ],
        )


__all__ = ["PubSubStatsType", "SessionsByKindType", "TopicKindEnum"]

"""GraphQL resolvers: root Query and Subscription types."""

from hrchat_service.features.graphql.resolvers.queries import Query
from hrchat_service.features.graphql.resolvers.subscriptions import Subscription

__all__ = ["Query", "Subscription"]

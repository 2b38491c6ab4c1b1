"""GraphQL API: chat subscriptions and fan-out queries."""

"""HR chat service: real-time event fan-out behind a GraphQL API."""

__version__ = "0.1.0"

"""Feature modules exposed over HTTP, WebSocket and GraphQL."""

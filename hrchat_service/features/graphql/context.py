"""GraphQL context for request-scoped dependencies.

The context is created once per HTTP request, and once per WebSocket
connection for subscriptions. It carries:
- The session manager (for opening subscription sessions)
- The event publisher
- WebSocket connection params (filled in by Strawberry on connection_init)

Following Strawberry's FastAPI integration pattern:
https://strawberry.rocks/docs/integrations/fastapi#context_getter
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from strawberry.fastapi import BaseContext

if TYPE_CHECKING:
    from starlette.background import BackgroundTasks
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.websockets import WebSocket

    from hrchat_service.infra.realtime.manager import SessionManager
    from hrchat_service.infra.realtime.publisher import EventPublisher

# Connection param keys checked for a user token, in order
CREDENTIAL_PARAM_KEYS = ("Authorization", "authorization", "token")


@dataclass
class GraphQLContext(BaseContext):
    """Request context for GraphQL operations.

    Standard fields (per Strawberry docs):
    - request: The HTTP request or WebSocket
    - response: The HTTP response (None for WebSocket)
    - background_tasks: FastAPI BackgroundTasks
    - connection_params: Payload of the WebSocket connection_init message

    Custom fields:
    - session_manager: Opens and closes subscription sessions
    - publisher: Publishes events to topics
    """

    request: Request | WebSocket | None = None
    response: Response | None = None
    background_tasks: BackgroundTasks | None = None
    connection_params: Any = None

    session_manager: SessionManager = field(default=None)  # type: ignore[assignment]
    publisher: EventPublisher = field(default=None)  # type: ignore[assignment]

    def credential_from_connection(self) -> str | None:
        """User token carried by the WebSocket connection params, if any."""
        params = self.connection_params
        if not isinstance(params, Mapping):
            return None
        for key in CREDENTIAL_PARAM_KEYS:
            value = params.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None


__all__ = ["CREDENTIAL_PARAM_KEYS", "GraphQLContext"]

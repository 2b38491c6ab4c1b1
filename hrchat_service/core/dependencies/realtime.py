"""Fan-out dependencies for FastAPI route handlers.

The lifespan builds one session manager and one publisher per application
and stores them on ``app.state``. These dependencies hand them to routes,
for both HTTP requests and WebSocket connections.

Usage:
    from hrchat_service.core.dependencies.realtime import PublisherDep

    @router.post("/notify/{user_id}")
    async def notify(user_id: int, publisher: PublisherDep):
        await publisher.publish(topic_for(TopicKind.MESSAGE_RECEIVED, user_id), {...})
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status
from starlette.requests import HTTPConnection

from hrchat_service.features.chat.notifier import ChatNotifier
from hrchat_service.infra.realtime.manager import SessionManager
from hrchat_service.infra.realtime.publisher import EventPublisher


def _unavailable(component: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "error": "realtime-unavailable",
            "message": f"{component} is not initialized",
        },
    )


def get_session_manager(connection: HTTPConnection) -> SessionManager:
    """Session manager of the running application.

    Raises:
        HTTPException: 503 Service Unavailable before startup completed
    """
    manager = getattr(connection.app.state, "session_manager", None)
    if manager is None:
        raise _unavailable("Session manager")
    return manager


def get_publisher(connection: HTTPConnection) -> EventPublisher:
    """Event publisher of the running application.

    Raises:
        HTTPException: 503 Service Unavailable before startup completed
    """
    publisher = getattr(connection.app.state, "publisher", None)
    if publisher is None:
        raise _unavailable("Publisher")
    return publisher


def get_chat_notifier(
    publisher: Annotated[EventPublisher, Depends(get_publisher)],
) -> ChatNotifier:
    return ChatNotifier(publisher)


SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
PublisherDep = Annotated[EventPublisher, Depends(get_publisher)]
ChatNotifierDep = Annotated[ChatNotifier, Depends(get_chat_notifier)]

__all__ = [
    "ChatNotifierDep",
    "PublisherDep",
    "SessionManagerDep",
    "get_chat_notifier",
    "get_publisher",
    "get_session_manager",
]

"""FastAPI dependencies shared by feature routers."""

from hrchat_service.core.dependencies.realtime import (
    ChatNotifierDep,
    PublisherDep,
    SessionManagerDep,
    get_chat_notifier,
    get_publisher,
    get_session_manager,
)

__all__ = [
    "ChatNotifierDep",
    "PublisherDep",
    "SessionManagerDep",
    "get_chat_notifier",
    "get_publisher",
    "get_session_manager",
]

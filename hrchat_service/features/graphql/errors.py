"""GraphQL error logging.

Errors raised on purpose (``AppException`` and subclasses such as a rejected
subscription token) are expected traffic and logged at INFO without a
traceback. Anything else keeps Strawberry's default ERROR logging.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import strawberry

from hrchat_service.core.exceptions import AppException

if TYPE_CHECKING:
    from graphql import GraphQLError
    from strawberry.types import ExecutionContext

logger = logging.getLogger(__name__)


def is_user_facing_error(error: GraphQLError) -> bool:
    return isinstance(error.original_error, AppException)


class ChatSchema(strawberry.Schema):
    """Schema that keeps rejected credentials out of the error log."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        internal: list[GraphQLError] = []
        for error in errors:
            if not is_user_facing_error(error):
                internal.append(error)
                continue

            exc = error.original_error
            logger.info(
                "GraphQL request rejected: %s",
                exc.type,
                extra={
                    "error_message": error.message,
                    "error_path": error.path,
                    "operation_name": getattr(execution_context, "operation_name", None),
                    **exc.extra,
                },
            )

        if internal:
            super().process_errors(internal, execution_context)


__all__ = ["ChatSchema", "is_user_facing_error"]

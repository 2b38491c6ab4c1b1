"""Exception hierarchy for the service.

HTTP-facing errors derive from :class:`AppException` and render as RFC 7807
Problem Details. Subclasses only pin class-level defaults (status, type,
title); any of them can still be overridden per instance.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, ClassVar


class AppException(Exception):
    """Base for errors that map onto a Problem Details response.

    Attributes:
        status_code: HTTP status code.
        detail: Human-readable explanation of this occurrence.
        type: Problem type identifier, e.g. ``"auth-error"``.
        title: Short summary of the problem type.
        instance: URI of the occurrence; the request path when unset.
        extra: Problem-type specific members added to the response body.

    Example:
        raise AppException(
            status_code=404,
            detail="Topic not found",
            type="topic-not-found",
            extra={"topic": "message_received_42"},
        )
    """

    default_status: ClassVar[int] = 500
    default_type: ClassVar[str] = "about:blank"
    default_title: ClassVar[str | None] = None

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        type: str | None = None,
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code or self.default_status
        self.detail = detail
        self.type = type or self.default_type
        self.title = title or self.default_title or self._default_title(self.status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        try:
            return HTTPStatus(status_code).phrase
        except ValueError:
            return "Error"


class ValidationException(AppException):
    """Invalid input, such as a blank subject id."""

    default_status = 422
    default_type = "validation-error"
    default_title = "Validation Error"


class AuthError(AppException):
    """Credential missing, invalid or expired when a subscription is opened.

    Surfaced to the subscribing client as the failure of the subscribe
    operation itself, never as a mid-stream event.
    """

    default_status = 401
    default_type = "auth-error"

    def __init__(
        self,
        detail: str = "AuthError: invalid user token",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail, extra=extra)


class ForbiddenException(AppException):
    """Operation disabled for this deployment (e.g. HTTP publish outside debug)."""

    default_status = 403
    default_type = "forbidden"


class RateLimitException(AppException):
    """A client went over a quota; ``retry_after`` becomes a Retry-After header."""

    default_status = 429
    default_type = "rate-limit-exceeded"

    def __init__(
        self,
        detail: str = "Rate limit exceeded",
        *,
        retry_after: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(detail, **kwargs)


class SubscriptionLimitError(RateLimitException):
    """Raised at open time when a subscriber already holds too many sessions."""

    default_type = "subscription-limit"

    def __init__(self, subject_id: str, limit: int) -> None:
        super().__init__(
            f"Subscription limit of {limit} sessions reached",
            extra={"subject_id": subject_id, "limit": limit},
        )


class DeliveryFailure(Exception):
    """Transport write error local to one subscription session.

    Raised and handled inside the delivery dispatcher; it never reaches the
    publisher or the producer that triggered the event.
    """

    def __init__(self, session_id: str, cause: BaseException) -> None:
        self.session_id = session_id
        self.cause = cause
        super().__init__(f"Delivery to session {session_id} failed: {cause!r}")


__all__ = [
    "AppException",
    "AuthError",
    "DeliveryFailure",
    "ForbiddenException",
    "RateLimitException",
    "SubscriptionLimitError",
    "ValidationException",
]

"""User token validation.

The subscription core never interprets credentials itself; it asks a
``TokenValidator`` for a stable subject id and treats ``None`` as failure.

The HR platform issues opaque user tokens that are the base64 encoding of
``"<userId>:<issued-data>"``. ``Base64TokenValidator`` accepts exactly that
shape. ``StaticTokenValidator`` maps literal tokens to subject ids and is
meant for local development and tests.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from hrchat_service.core.settings.auth import AuthSettings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True, slots=True)
class Identity:
    """Authenticated subscriber identity."""

    subject_id: str


class TokenValidator(Protocol):
    """Turns an opaque credential into a subject identity."""

    def validate(self, credential: str | None) -> Identity | None:
        """Return the identity for ``credential`` or None when it is not valid."""
        ...


def strip_bearer(credential: str) -> str:
    """Remove an optional ``Bearer `` prefix."""
    if credential.startswith(BEARER_PREFIX):
        return credential[len(BEARER_PREFIX) :].strip()
    return credential.strip()


class Base64TokenValidator:
    """Validates ``base64("<userId>:...")`` user tokens."""

    def __init__(self, *, accept_bearer_prefix: bool = True) -> None:
        self._accept_bearer_prefix = accept_bearer_prefix

    def validate(self, credential: str | None) -> Identity | None:
        if not credential:
            return None

        token = strip_bearer(credential) if self._accept_bearer_prefix else credential
        # Mobile clients send unpadded tokens
        token += "=" * (-len(token) % 4)
        try:
            decoded = base64.b64decode(token, validate=True).decode("ascii")
        except (binascii.Error, UnicodeDecodeError, ValueError):
            logger.debug("Rejected undecodable user token")
            return None

        user_id, _, _ = decoded.partition(":")
        user_id = user_id.strip()
        if not user_id.isdigit():
            logger.debug("Rejected user token with non-numeric subject")
            return None

        return Identity(subject_id=str(int(user_id)))


class StaticTokenValidator:
    """Looks credentials up in a fixed token -> subject id map."""

    def __init__(
        self,
        tokens: Mapping[str, str],
        *,
        fallback: TokenValidator | None = None,
        accept_bearer_prefix: bool = True,
    ) -> None:
        self._tokens = dict(tokens)
        self._fallback = fallback
        self._accept_bearer_prefix = accept_bearer_prefix

    def validate(self, credential: str | None) -> Identity | None:
        if not credential:
            return None

        token = strip_bearer(credential) if self._accept_bearer_prefix else credential
        subject_id = self._tokens.get(token)
        if subject_id is not None:
            return Identity(subject_id=str(subject_id))
        if self._fallback is not None:
            return self._fallback.validate(credential)
        return None


def encode_user_token(user_id: int | str, issued: str = "") -> str:
    """Build a user token in the platform's format (used by the CLI and tests)."""
    raw = f"{user_id}:{issued}".encode("ascii")
    return base64.b64encode(raw).decode("ascii")


def build_token_validator(settings: AuthSettings) -> TokenValidator:
    """Create the validator configured by ``AUTH_*`` settings."""
    validator: TokenValidator = Base64TokenValidator(
        accept_bearer_prefix=settings.accept_bearer_prefix,
    )
    if settings.has_static_tokens:
        logger.warning(
            "Static user tokens enabled",
            extra={"token_count": len(settings.static_tokens)},
        )
        validator = StaticTokenValidator(
            settings.static_tokens,
            fallback=validator,
            accept_bearer_prefix=settings.accept_bearer_prefix,
        )
    return validator

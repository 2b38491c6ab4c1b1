"""Identity/token validation collaborators."""

from hrchat_service.infra.auth.tokens import (
    Base64TokenValidator,
    Identity,
    StaticTokenValidator,
    TokenValidator,
    build_token_validator,
    encode_user_token,
    strip_bearer,
)

__all__ = [
    "Base64TokenValidator",
    "Identity",
    "StaticTokenValidator",
    "TokenValidator",
    "build_token_validator",
    "encode_user_token",
    "strip_bearer",
]

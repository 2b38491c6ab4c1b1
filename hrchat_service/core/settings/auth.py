"""Authentication settings for the user token validator."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """User token validation settings.

    Environment variables use AUTH_ prefix.
    Example: AUTH_STATIC_TOKENS='{"dev-token": "42"}'
    """

    accept_bearer_prefix: bool = Field(
        default=True,
        description="Strip an optional 'Bearer ' prefix from presented credentials",
    )

    static_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Development-only map of literal tokens to subject ids",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def has_static_tokens(self) -> bool:
        """Check whether a static token map is configured."""
        return bool(self.static_tokens)

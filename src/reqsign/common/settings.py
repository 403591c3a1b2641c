"""Configuration management using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REQSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Signing
    signing_key: str | None = Field(
        default=None,
        description="Shared HMAC secret for signing and verification",
    )
    signature_header: str = Field(
        default="X-Signature",
        description="Header carrying the base64 signature",
    )
    expiry_header: str = Field(
        default="X-Signature-Expires",
        description="Header carrying the RFC 3339 expiry timestamp",
    )
    signed_headers: tuple[str, ...] = Field(
        default=(),
        description="Additional headers covered by the signature, in order",
    )
    signature_ttl_seconds: float = Field(
        default=300.0,
        description="Lifetime (seconds) of signatures produced for outbound requests",
    )
    max_body_bytes: int = Field(
        default=1 << 20,
        description="Maximum request body size covered by a signature",
    )

    # Auth
    auth_mode: Literal["none", "signature"] = Field(
        default="none",
        description="Authentication mode for inbound requests",
    )
    auth_exempt_paths: tuple[str, ...] = Field(
        default=("/health",),
        description="Paths exempt from signature verification",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level name",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines instead of console output",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

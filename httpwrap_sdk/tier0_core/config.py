"""
httpwrap_sdk.tier0_core.config
────────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic and prefixed with HTTPWRAP_.
Invalid values fail when the config is first loaded. Nothing loads it at
import time: logging reads it on first use, and transport settings are
checked only when the default httpx transport is built.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from httpwrap_sdk.tier0_core.errors import ConfigurationError


class ClientConfig(BaseSettings):
    """
    Typed client configuration. The transport settings are only read when
    the default httpx transport is built; an injected transport ignores them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="HTTPWRAP_LOG_LEVEL")
    log_format: str = Field(default="json", alias="HTTPWRAP_LOG_FORMAT")

    # ── Error reporting ───────────────────────────────────────────────────────
    error_backend: str = Field(default="none", alias="HTTPWRAP_ERROR_BACKEND")

    # ── Transport ─────────────────────────────────────────────────────────────
    timeout: float = Field(default=30.0, alias="HTTPWRAP_TIMEOUT")
    verify_tls: bool = Field(default=True, alias="HTTPWRAP_VERIFY_TLS")
    follow_redirects: bool = Field(default=False, alias="HTTPWRAP_FOLLOW_REDIRECTS")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got {v!r}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("error_backend")
    @classmethod
    def validate_error_backend(cls, v: str) -> str:
        allowed = {"none", "sentry", "otel"}
        if v.lower() not in allowed:
            raise ValueError(f"error_backend must be one of {allowed}, got {v!r}")
        return v.lower()


@lru_cache(maxsize=1)
def get_config() -> ClientConfig:
    """
    Return the singleton client config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    try:
        return ClientConfig()
    except ValidationError as exc:
        raise ConfigurationError(f"invalid client configuration: {exc}") from exc


def _reset_config() -> None:
    """For tests — clear the config cache."""
    get_config.cache_clear()


__all__ = ["ClientConfig", "get_config"]

"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

AUTH_FAILURE_POLICIES = frozenset({"keep", "revert", "failed"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    host: str = "127.0.0.1"
    port: int = 6060
    sdk_module: str = "makerbot_sdk:PrinterFinder"
    sdk_client_id: str | None = None
    sdk_client_secret: str | None = None
    static_dir: Path | None = None
    auth_failure_policy: str = "keep"
    max_sessions: int | None = None
    stream_queue_size: int = 64
    stream_ping_seconds: int = 15
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_auth_failure_policy(raw: str | None) -> str:
    """Normalize the auth failure policy from env."""
    if raw is None:
        return "keep"
    cleaned = raw.strip().lower()
    if not cleaned:
        return "keep"
    if cleaned not in AUTH_FAILURE_POLICIES:
        allowed = ", ".join(sorted(AUTH_FAILURE_POLICIES))
        raise ValueError(
            f"Unknown auth failure policy {raw!r}; expected one of {allowed}"
        )
    return cleaned


def parse_sdk_module(raw: str) -> tuple[str, str]:
    """Split a ``module:attribute`` reference to the SDK finder factory."""
    module_name, _, attribute = raw.strip().partition(":")
    if not module_name:
        raise ValueError("sdk_module must name a module")
    return module_name, attribute or "PrinterFinder"

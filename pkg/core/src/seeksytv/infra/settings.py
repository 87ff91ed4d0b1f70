"""
Application settings for SeeksyTV.

This module defines all configuration settings for SeeksyTV using Pydantic BaseSettings.
Runtime components never read ``settings`` directly; factories and the CLI pass
the values they need into the components they construct.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Hosted backend (database REST + edge functions)
    supabase_url: str = Field(default="http://127.0.0.1:54321", alias="SUPABASE_URL")
    supabase_anon_key: str = Field(default="", alias="SUPABASE_ANON_KEY")
    http_timeout_seconds: float = Field(default=10.0, gt=0, alias="HTTP_TIMEOUT_SECONDS")

    # Ad playback
    ad_skip_delay_seconds: int = Field(default=5, ge=0, alias="AD_SKIP_DELAY_SECONDS")
    telemetry_workers: int = Field(default=2, ge=1, alias="TELEMETRY_WORKERS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("SEEKSYTV_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]

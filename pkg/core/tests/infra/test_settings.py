"""Environment-driven settings."""

import pytest
from pydantic import ValidationError

from seeksytv.infra.settings import Settings


def test_defaults(monkeypatch):
    for name in ("SUPABASE_URL", "AD_SKIP_DELAY_SECONDS", "TELEMETRY_WORKERS", "HTTP_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.ad_skip_delay_seconds == 5
    assert settings.telemetry_workers == 2
    assert settings.http_timeout_seconds == 10.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co")
    monkeypatch.setenv("AD_SKIP_DELAY_SECONDS", "0")
    settings = Settings(_env_file=None)
    assert settings.supabase_url == "https://abc.supabase.co"
    assert settings.ad_skip_delay_seconds == 0


def test_negative_skip_delay_rejected(monkeypatch):
    monkeypatch.setenv("AD_SKIP_DELAY_SECONDS", "-1")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)

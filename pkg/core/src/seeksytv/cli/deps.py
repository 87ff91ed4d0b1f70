"""
Backend wiring for CLI commands.

Commands obtain their client here so tests can substitute a fake by
patching :func:`build_client`.
"""

from __future__ import annotations

from seeksytv.infra.settings import settings
from seeksytv.infra.supabase import SupabaseClient


def build_client() -> SupabaseClient:
    return SupabaseClient(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout=settings.http_timeout_seconds,
    )

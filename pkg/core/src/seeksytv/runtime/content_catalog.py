"""
Content catalog lookups.

Resolves a watch-page content id to a :class:`ContentItem` (with its channel)
and lists related published items. Ids that are not canonical UUIDs are
treated as "not found" without a remote call.
"""

from __future__ import annotations

import re
from typing import Any

from seeksytv.infra.exceptions import ContentLookupError, FunctionInvocationError
from seeksytv.infra.logging import get_logger
from seeksytv.infra.supabase import SupabaseClient
from seeksytv.runtime.ad_types import ContentItem
from seeksytv.runtime.constants import CONTENT_SELECT, CONTENT_TABLE, RELATED_LIMIT

_log = get_logger(__name__)

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_valid_content_id(value: str | None) -> bool:
    return bool(value) and _UUID_RE.match(value) is not None


def content_from_row(row: dict[str, Any]) -> ContentItem:
    channel = row.get("channel") or {}
    duration = row.get("duration_seconds")
    return ContentItem(
        id=str(row["id"]),
        title=row.get("title") or "",
        video_url=row.get("video_url") or "",
        duration_seconds=float(duration) if duration is not None else None,
        channel_id=channel.get("id") or row.get("channel_id"),
        channel_name=channel.get("name"),
        channel_slug=channel.get("slug"),
        series_name=row.get("series_name"),
        thumbnail_url=row.get("thumbnail_url"),
        is_published=bool(row.get("is_published", True)),
    )


class ContentCatalog:
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def get(self, video_id: str) -> ContentItem | None:
        """
        Look up one content item with its channel.

        Returns:
            The item, or None if the id is malformed or unknown

        Raises:
            ContentLookupError: If the catalog cannot be queried
        """
        if not is_valid_content_id(video_id):
            _log.info("content_id_invalid", video_id=video_id)
            return None
        rows = self._select({"select": CONTENT_SELECT, "id": f"eq.{video_id}", "limit": "1"})
        if not rows:
            return None
        return content_from_row(rows[0])

    def related(self, video_id: str, limit: int = RELATED_LIMIT) -> list[ContentItem]:
        """Other published items, for the "up next" rail."""
        rows = self._select(
            {
                "select": "*",
                "id": f"neq.{video_id}",
                "is_published": "eq.true",
                "limit": str(limit),
            }
        )
        return [content_from_row(row) for row in rows]

    def _select(self, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            return self._client.select(CONTENT_TABLE, params)
        except FunctionInvocationError as exc:
            raise ContentLookupError(f"Content lookup failed: {exc}") from exc

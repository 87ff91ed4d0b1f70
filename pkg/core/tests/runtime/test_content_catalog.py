"""Content catalog lookups against a mocked REST client."""

from unittest.mock import MagicMock

import pytest

from seeksytv.infra.exceptions import ContentLookupError, FunctionInvocationError
from seeksytv.runtime.constants import CONTENT_SELECT, CONTENT_TABLE
from seeksytv.runtime.content_catalog import ContentCatalog, content_from_row, is_valid_content_id

VIDEO_ID = "3f1c2d4e-5a6b-4c7d-8e9f-0a1b2c3d4e5f"

ROW = {
    "id": VIDEO_ID,
    "title": "Episode 1",
    "video_url": "https://cdn.example/ep1.mp4",
    "duration_seconds": 1800,
    "series_name": "Founders",
    "is_published": True,
    "channel": {"id": "channel-1", "name": "Seeksy Originals", "slug": "originals"},
}


def test_valid_content_ids():
    assert is_valid_content_id(VIDEO_ID)
    assert is_valid_content_id(VIDEO_ID.upper())
    assert not is_valid_content_id("episode-1")
    assert not is_valid_content_id("")
    assert not is_valid_content_id(None)


def test_row_with_channel():
    item = content_from_row(ROW)
    assert item.id == VIDEO_ID
    assert item.duration_seconds == 1800.0
    assert item.channel_id == "channel-1"
    assert item.channel_slug == "originals"
    assert item.display_channel_name == "Seeksy Originals"


def test_display_name_falls_back():
    row = dict(ROW, channel=None, channel_id="channel-2")
    item = content_from_row(row)
    assert item.channel_id == "channel-2"
    assert item.display_channel_name == "Founders"
    assert content_from_row(dict(row, series_name=None)).display_channel_name == "Seeksy TV"


def test_get_selects_by_id():
    client = MagicMock()
    client.select.return_value = [ROW]

    item = ContentCatalog(client).get(VIDEO_ID)

    assert item is not None and item.title == "Episode 1"
    client.select.assert_called_once_with(
        CONTENT_TABLE, {"select": CONTENT_SELECT, "id": f"eq.{VIDEO_ID}", "limit": "1"}
    )


def test_get_unknown_returns_none():
    client = MagicMock()
    client.select.return_value = []
    assert ContentCatalog(client).get(VIDEO_ID) is None


def test_malformed_id_skips_remote_call():
    client = MagicMock()
    assert ContentCatalog(client).get("not-a-uuid") is None
    client.select.assert_not_called()


def test_lookup_failure_is_wrapped():
    client = MagicMock()
    client.select.side_effect = FunctionInvocationError("boom", CONTENT_TABLE, 503)
    with pytest.raises(ContentLookupError):
        ContentCatalog(client).get(VIDEO_ID)


def test_related_excludes_current_item():
    client = MagicMock()
    client.select.return_value = [dict(ROW, id="other")]

    related = ContentCatalog(client).related(VIDEO_ID, limit=4)

    assert [item.id for item in related] == ["other"]
    params = client.select.call_args.args[1]
    assert params["id"] == f"neq.{VIDEO_ID}"
    assert params["is_published"] == "eq.true"
    assert params["limit"] == "4"

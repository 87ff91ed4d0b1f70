"""
Pydantic schemas for edge-function serialization.

This module contains all Pydantic models used for the request/response bodies
exchanged with the ad-decision and telemetry functions. Runtime code converts
them to and from the frozen dataclasses in ``seeksytv.runtime.ad_types``.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class AdPayload(BaseModel):
    """Ad row as returned by the ad-decision function."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Ad identifier")
    title: str | None = Field(None, description="Advertiser-facing title")
    type: str | None = Field("video", description="Media type of the asset (audio or video)")
    asset_url: str = Field(..., min_length=1, description="Playable asset URL")
    duration_seconds: float = Field(0.0, ge=0, description="Declared duration in seconds")
    click_url: str | None = Field(None, description="Advertiser click-through destination")
    thumbnail_url: str | None = Field(None, description="Poster image")


class AdResolutionRequest(BaseModel):
    """Body sent to the ad-decision function."""

    video_id: str
    channel_id: str | None = None


class AdResolutionResponse(BaseModel):
    """
    Pre-roll and post-roll assignment for one content item.

    Ad rows are kept raw here and validated one position at a time, so a
    malformed post-roll does not cost the pre-roll.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    pre_ad: dict[str, Any] | None = Field(None, alias="preAd")
    pre_placement_id: str | None = Field(None, alias="prePlacementId")
    post_ad: dict[str, Any] | None = Field(None, alias="postAd")
    post_placement_id: str | None = Field(None, alias="postPlacementId")


class ImpressionPayload(BaseModel):
    """Body sent to the impression-logging function."""

    ad_id: str
    placement_id: str
    video_id: str
    channel_id: str | None = None
    position: Literal["pre", "post"]
    viewer_session_id: str


class AdEventPayload(BaseModel):
    """Body sent to the ad-event logging function."""

    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(..., alias="eventType")
    ad_id: str = Field(..., alias="adId")
    placement_id: str = Field(..., alias="placementId")
    video_id: str = Field(..., alias="videoId")
    channel_id: str | None = Field(None, alias="channelId")
    position: Literal["pre", "post"]
    viewer_session_id: str = Field(..., alias="viewerSessionId")
    duration_seconds: float = Field(..., alias="durationSeconds")
    at_second: float | None = Field(None, alias="atSecond")
    error_code: str | None = Field(None, alias="errorCode")

    def to_wire(self) -> dict[str, Any]:
        """Camel-cased body; optional markers are omitted when unset, channelId is always sent."""
        body = self.model_dump(by_alias=True, exclude={"at_second", "error_code"})
        if self.at_second is not None:
            body["atSecond"] = self.at_second
        if self.error_code is not None:
            body["errorCode"] = self.error_code
        return body

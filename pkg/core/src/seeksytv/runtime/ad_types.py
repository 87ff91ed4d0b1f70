"""
Ad Playback Types

Canonical data structures shared by the resolver, the playback controller,
the event tracker and the failover handler. Everything here is immutable once
built; the controller owns the live state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from seeksytv.runtime.constants import DEFAULT_CHANNEL_NAME


class AdMediaType(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"


class AdPosition(str, Enum):
    PRE = "pre"
    POST = "post"


class PlayerMode(str, Enum):
    """What the single playback surface is currently showing."""

    CONTENT = "content"
    AD = "ad"


class PlaybackState(str, Enum):
    """
    Controller state.

    CONTENT_IDLE is the pre-play state: content is loaded but the viewer has
    not pressed play. A pre-roll may only start from here. ENDED is terminal
    for ad scheduling.
    """

    CONTENT_IDLE = "content_idle"
    CONTENT_PLAYING = "content_playing"
    CONTENT_PAUSED = "content_paused"
    AD_PRE = "ad_pre"
    AD_POST = "ad_post"
    ENDED = "ended"

    @property
    def mode(self) -> PlayerMode:
        if self in (PlaybackState.AD_PRE, PlaybackState.AD_POST):
            return PlayerMode.AD
        return PlayerMode.CONTENT


class AdEventType(str, Enum):
    """Ad lifecycle events; values are the names the event-logging function accepts."""

    START = "start"
    FIRST_QUARTILE = "first_quartile"
    MIDPOINT = "midpoint"
    THIRD_QUARTILE = "third_quartile"
    COMPLETE = "complete"
    SKIP = "skip"
    ERROR = "error"
    CLICK = "click"


QUARTILE_EVENTS = (
    AdEventType.FIRST_QUARTILE,
    AdEventType.MIDPOINT,
    AdEventType.THIRD_QUARTILE,
)


class AdErrorCode(str, Enum):
    """Classification reported with an ``error`` event."""

    MEDIA_404 = "MEDIA_404"
    MEDIA_DECODE = "MEDIA_DECODE"
    UNKNOWN = "UNKNOWN"


class MediaErrorCode(IntEnum):
    """Media element error codes (same numbering as HTML MediaError)."""

    ABORTED = 1
    NETWORK = 2
    DECODE = 3
    SRC_NOT_SUPPORTED = 4


@dataclass(frozen=True)
class MediaError:
    code: MediaErrorCode
    message: str = ""


@dataclass(frozen=True)
class AdDescriptor:
    """An ad as returned by the ad-decision service."""

    id: str
    asset_url: str
    duration_seconds: float
    type: AdMediaType = AdMediaType.VIDEO
    title: str = ""
    click_url: str | None = None
    thumbnail_url: str | None = None


@dataclass(frozen=True)
class PlacementAssignment:
    """An ad bound to a placement slot at one position."""

    ad: AdDescriptor
    placement_id: str
    position: AdPosition


@dataclass(frozen=True)
class AdBreakPlan:
    """Resolved ads for one content load."""

    pre: PlacementAssignment | None = None
    post: PlacementAssignment | None = None

    @classmethod
    def empty(cls) -> AdBreakPlan:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.pre is None and self.post is None

    def for_position(self, position: AdPosition) -> PlacementAssignment | None:
        return self.pre if position is AdPosition.PRE else self.post


@dataclass(frozen=True)
class ContentItem:
    """A published (or unpublished) piece of Seeksy TV content."""

    id: str
    title: str
    video_url: str
    duration_seconds: float | None = None
    channel_id: str | None = None
    channel_name: str | None = None
    channel_slug: str | None = None
    series_name: str | None = None
    thumbnail_url: str | None = None
    is_published: bool = True

    @property
    def display_channel_name(self) -> str:
        return self.channel_name or self.series_name or DEFAULT_CHANNEL_NAME


@dataclass(frozen=True)
class AdContext:
    """Correlation fields attached to every event for the active ad."""

    ad_id: str
    placement_id: str
    video_id: str
    channel_id: str | None
    position: AdPosition
    viewer_session_id: str
    duration_seconds: float

    @classmethod
    def for_assignment(
        cls,
        assignment: PlacementAssignment,
        content: ContentItem,
        viewer_session_id: str,
    ) -> AdContext:
        return cls(
            ad_id=assignment.ad.id,
            placement_id=assignment.placement_id,
            video_id=content.id,
            channel_id=content.channel_id,
            position=assignment.position,
            viewer_session_id=viewer_session_id,
            duration_seconds=assignment.ad.duration_seconds,
        )

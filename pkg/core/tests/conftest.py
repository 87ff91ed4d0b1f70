"""
Global test configuration for SeeksyTV.

This module provides global pytest configuration and fixtures: an in-process
function client, inline telemetry, stepped timers and a simulated playback
surface wired to a controller.
"""

import sys
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from seeksytv.infra.supabase import RecordingFunctionClient
from seeksytv.runtime.ad_types import (
    AdBreakPlan,
    AdDescriptor,
    AdPosition,
    ContentItem,
    PlacementAssignment,
)
from seeksytv.runtime.clock import SteppedTimerScheduler
from seeksytv.runtime.constants import LOG_AD_EVENT_FUNCTION
from seeksytv.runtime.dispatch import InlineExecutor, TelemetryDispatcher
from seeksytv.runtime.event_tracker import AdEventTracker
from seeksytv.runtime.playback_controller import PlaybackController
from seeksytv.runtime.playback_surface import SimulatedPlaybackSurface
from seeksytv.runtime.simulation import PlaybackSimulator
from seeksytv.runtime.skip_gate import SkipGate
from seeksytv.runtime.viewer_session import ViewerSession

CONTENT_ID = "3f1c2d4e-5a6b-4c7d-8e9f-0a1b2c3d4e5f"
CONTENT_URL = "https://cdn.seeksy.local/content/episode-1.mp4"
PRE_URL = "https://cdn.seeksy.local/ads/pre.mp4"
POST_URL = "https://cdn.seeksy.local/ads/post.mp4"

CONTENT_SECONDS = 60.0
PRE_SECONDS = 20.0
POST_SECONDS = 10.0


def make_plan(pre: bool = True, post: bool = True) -> AdBreakPlan:
    pre_assignment = PlacementAssignment(
        ad=AdDescriptor(
            id="ad-pre",
            asset_url=PRE_URL,
            duration_seconds=PRE_SECONDS,
            title="Spring Sale",
            click_url="https://advertiser.example/spring",
        ),
        placement_id="placement-pre",
        position=AdPosition.PRE,
    )
    post_assignment = PlacementAssignment(
        ad=AdDescriptor(id="ad-post", asset_url=POST_URL, duration_seconds=POST_SECONDS),
        placement_id="placement-post",
        position=AdPosition.POST,
    )
    return AdBreakPlan(
        pre=pre_assignment if pre else None,
        post=post_assignment if post else None,
    )


@pytest.fixture
def content() -> ContentItem:
    return ContentItem(
        id=CONTENT_ID,
        title="Episode 1",
        video_url=CONTENT_URL,
        duration_seconds=CONTENT_SECONDS,
        channel_id="channel-1",
        channel_name="Seeksy Originals",
        channel_slug="seeksy-originals",
    )


@pytest.fixture
def client() -> RecordingFunctionClient:
    return RecordingFunctionClient()


@pytest.fixture
def scheduler() -> SteppedTimerScheduler:
    return SteppedTimerScheduler()


@pytest.fixture
def dispatcher() -> TelemetryDispatcher:
    return TelemetryDispatcher(InlineExecutor())


@pytest.fixture
def opened_urls() -> list:
    return []


@pytest.fixture
def tracker(client, dispatcher, opened_urls) -> AdEventTracker:
    return AdEventTracker(client, dispatcher, opener=opened_urls.append)


@pytest.fixture
def surface() -> SimulatedPlaybackSurface:
    return SimulatedPlaybackSurface(
        media_durations={
            CONTENT_URL: CONTENT_SECONDS,
            PRE_URL: PRE_SECONDS,
            POST_URL: POST_SECONDS,
        }
    )


@pytest.fixture
def controller(content, surface, tracker, scheduler) -> PlaybackController:
    ctrl = PlaybackController(
        content,
        surface,
        tracker,
        SkipGate(scheduler, delay_seconds=5),
        ViewerSession.new(),
    )
    ctrl.start()
    return ctrl


@pytest.fixture
def sim(surface, scheduler) -> PlaybackSimulator:
    return PlaybackSimulator(surface, scheduler, step_seconds=0.25)


@pytest.fixture
def logged_events(client):
    """Event types posted to the event-logging function, in order."""

    def _events() -> list[str]:
        return [body["eventType"] for body in client.bodies(LOG_AD_EVENT_FUNCTION)]

    return _events

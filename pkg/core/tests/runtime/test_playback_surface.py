"""Simulated playback surface: single source, media events, autoplay policy."""

import pytest

from seeksytv.infra.exceptions import PlaybackBlockedError
from seeksytv.runtime.ad_types import MediaErrorCode, PlayerMode
from seeksytv.runtime.playback_surface import SimulatedPlaybackSurface


class RecordingListener:
    def __init__(self):
        self.events = []

    def on_loaded_metadata(self, duration):
        self.events.append(("metadata", duration))

    def on_time_update(self, position):
        self.events.append(("time", position))

    def on_ended(self):
        self.events.append(("ended",))

    def on_media_error(self, error):
        self.events.append(("error", error.code))


@pytest.fixture
def listener():
    return RecordingListener()


def test_load_replaces_source_and_resets_position(listener):
    surface = SimulatedPlaybackSurface(default_duration=10.0)
    surface.bind(listener)
    surface.load_source("https://cdn.example/a.mp4", PlayerMode.CONTENT)
    surface.play()
    surface.advance(2.0)

    surface.load_source("https://cdn.example/ad.mp4", PlayerMode.AD)

    assert surface.source == "https://cdn.example/ad.mp4"
    assert surface.mode is PlayerMode.AD
    assert surface.position == 0.0
    assert surface.duration is None
    assert not surface.playing
    assert surface.load_history == [
        ("https://cdn.example/a.mp4", PlayerMode.CONTENT),
        ("https://cdn.example/ad.mp4", PlayerMode.AD),
    ]


def test_emits_metadata_updates_and_ended(listener):
    surface = SimulatedPlaybackSurface(default_duration=1.0, time_update_interval=0.5)
    surface.bind(listener)
    surface.load_source("https://cdn.example/a.mp4", PlayerMode.CONTENT)
    surface.play()

    surface.advance(2.0)

    assert listener.events == [
        ("metadata", 1.0),
        ("time", 0.5),
        ("time", 1.0),
        ("ended",),
    ]
    assert not surface.playing


def test_load_error_reported_on_next_advance(listener):
    surface = SimulatedPlaybackSurface(
        failing_sources={"https://cdn.example/bad.mp4": MediaErrorCode.SRC_NOT_SUPPORTED}
    )
    surface.bind(listener)
    surface.load_source("https://cdn.example/bad.mp4", PlayerMode.AD)
    surface.play()
    assert listener.events == []

    surface.advance(0.25)

    assert listener.events == [("error", MediaErrorCode.SRC_NOT_SUPPORTED)]
    assert not surface.playing


def test_autoplay_policy_refuses_play():
    surface = SimulatedPlaybackSurface(autoplay_blocked=True)
    surface.load_source("https://cdn.example/a.mp4", PlayerMode.CONTENT)
    with pytest.raises(PlaybackBlockedError):
        surface.play()
    surface.allow_playback()
    surface.play()
    assert surface.playing


def test_play_without_source_is_refused():
    with pytest.raises(PlaybackBlockedError):
        SimulatedPlaybackSurface().play()


def test_empty_source_rejected():
    with pytest.raises(ValueError):
        SimulatedPlaybackSurface().load_source("", PlayerMode.CONTENT)


def test_second_listener_rejected(listener):
    surface = SimulatedPlaybackSurface()
    surface.bind(listener)
    with pytest.raises(RuntimeError):
        surface.bind(RecordingListener())
    surface.unbind()
    surface.bind(RecordingListener())


def test_volume_is_clamped():
    surface = SimulatedPlaybackSurface()
    surface.set_volume(1.5)
    assert surface.volume == 1.0
    surface.set_volume(-0.2)
    assert surface.volume == 0.0

"""Playback simulator keeps timers and media time in lockstep."""

import pytest

from seeksytv.runtime.ad_types import PlayerMode
from seeksytv.runtime.clock import SteppedTimerScheduler
from seeksytv.runtime.playback_surface import SimulatedPlaybackSurface
from seeksytv.runtime.simulation import PlaybackSimulator


def test_run_advances_both_timelines():
    surface = SimulatedPlaybackSurface(default_duration=30.0)
    scheduler = SteppedTimerScheduler()
    ticks = []
    scheduler.call_every(1.0, lambda: ticks.append(surface.position))
    surface.load_source("https://cdn.example/a.mp4", PlayerMode.CONTENT)
    surface.play()

    sim = PlaybackSimulator(surface, scheduler, step_seconds=0.5)
    now = sim.run(3.0)

    assert now == pytest.approx(3.0)
    assert surface.position == pytest.approx(3.0)
    # Timers fire before media time advances within a step
    assert ticks == pytest.approx([0.5, 1.5, 2.5])


def test_run_until_times_out():
    sim = PlaybackSimulator(SimulatedPlaybackSurface(), SteppedTimerScheduler(), step_seconds=0.25)
    assert sim.run_until(lambda: False, timeout=1.0) is False
    assert sim.now == pytest.approx(1.0)


def test_run_until_stops_on_predicate():
    sim = PlaybackSimulator(SimulatedPlaybackSurface(), SteppedTimerScheduler(), step_seconds=0.25)
    assert sim.run_until(lambda: sim.now >= 0.5, timeout=10.0) is True
    assert sim.now == pytest.approx(0.5)


def test_step_must_be_positive():
    with pytest.raises(ValueError):
        PlaybackSimulator(SimulatedPlaybackSurface(), SteppedTimerScheduler(), step_seconds=0)

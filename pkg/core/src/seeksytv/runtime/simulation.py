"""
Headless playback simulation.

Advances a :class:`SimulatedPlaybackSurface` and a
:class:`SteppedTimerScheduler` in lockstep so media time and the skip-gate
countdown share one timeline. Timers fire before media events for the same
step, matching a browser where the countdown interval and ``timeupdate`` are
independent sources.
"""

from __future__ import annotations

from typing import Callable

from seeksytv.runtime.clock import SteppedTimerScheduler
from seeksytv.runtime.playback_surface import SimulatedPlaybackSurface

DEFAULT_STEP_SECONDS = 0.05


class PlaybackSimulator:
    def __init__(
        self,
        surface: SimulatedPlaybackSurface,
        scheduler: SteppedTimerScheduler,
        step_seconds: float = DEFAULT_STEP_SECONDS,
    ) -> None:
        if step_seconds <= 0:
            raise ValueError("step_seconds must be positive")
        self.surface = surface
        self.scheduler = scheduler
        self.step_seconds = step_seconds

    @property
    def now(self) -> float:
        return self.scheduler.clock.now()

    def step(self, seconds: float | None = None) -> None:
        dt = self.step_seconds if seconds is None else seconds
        self.scheduler.advance(dt)
        self.surface.advance(dt)

    def run(self, seconds: float) -> float:
        """Advance ``seconds`` of player time in fixed steps."""
        remaining = seconds
        while remaining > 1e-9:
            dt = min(self.step_seconds, remaining)
            self.step(dt)
            remaining -= dt
        return self.now

    def run_until(self, predicate: Callable[[], bool], timeout: float) -> bool:
        """Step until ``predicate`` holds or ``timeout`` seconds of player time pass."""
        deadline = self.now + timeout
        while not predicate():
            if self.now >= deadline - 1e-9:
                return False
            self.step(min(self.step_seconds, deadline - self.now))
        return True

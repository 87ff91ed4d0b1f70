"""
Skip gate for the active ad.

The gate starts locked whenever an ad begins and counts down in whole seconds
on a repeating timer. When the countdown reaches zero the gate unlocks and the
timer is cancelled. Skipping is a no-op while the gate is locked.
"""

from __future__ import annotations

from threading import Lock

from seeksytv.runtime.clock import TimerHandle, TimerScheduler
from seeksytv.runtime.constants import DEFAULT_SKIP_DELAY_SECONDS, SKIP_TICK_SECONDS


class SkipGate:
    def __init__(
        self,
        scheduler: TimerScheduler,
        delay_seconds: int = DEFAULT_SKIP_DELAY_SECONDS,
        tick_seconds: float = SKIP_TICK_SECONDS,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")
        self._scheduler = scheduler
        self.delay_seconds = delay_seconds
        self._tick_seconds = tick_seconds
        self._remaining = delay_seconds
        self._can_skip = False
        self._active = False
        self._timer: TimerHandle | None = None
        self._lock = Lock()

    @property
    def remaining_seconds(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def can_skip(self) -> bool:
        with self._lock:
            return self._active and self._can_skip

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def start(self) -> None:
        """Lock the gate and restart the countdown for a new ad."""
        self.stop()
        with self._lock:
            self._active = True
            self._remaining = self.delay_seconds
            self._can_skip = self.delay_seconds == 0
            if not self._can_skip:
                self._timer = self._scheduler.call_every(self._tick_seconds, self._tick)

    def stop(self) -> None:
        """Cancel the countdown and return to the idle, locked state."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._active = False
            self._can_skip = False
            self._remaining = self.delay_seconds
        if timer is not None:
            timer.cancel()

    def _tick(self) -> None:
        with self._lock:
            if not self._active or self._timer is None:
                return
            if self._remaining <= 1:
                self._remaining = 0
                self._can_skip = True
                timer, self._timer = self._timer, None
            else:
                self._remaining -= 1
                return
        timer.cancel()

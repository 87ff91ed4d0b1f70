"""Clock and timer abstractions used by the playback runtime.

The master clock supplies *player time*: a monotonic timeline shared by the
skip-gate countdown and any simulated playback surface. Player time never
jumps backwards.

Repeating timers are created through a :class:`TimerScheduler`. Production
code uses :class:`ThreadingTimerScheduler`; simulations and tests use
:class:`SteppedTimerScheduler`, whose timers fire only when the stepped clock
is advanced.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Protocol

TimerCallback = Callable[[], None]


class SteppedMasterClock:
    """Deterministic master clock.

    Player time advances only when :meth:`advance` is called.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._current = start
        self._lock = Lock()

    def now(self) -> float:
        with self._lock:
            return self._current

    def advance(self, seconds: float) -> float:
        """Advance the clock by ``seconds`` (must be non-negative)."""
        if seconds < 0.0:
            raise ValueError("seconds must be non-negative")
        with self._lock:
            self._current += seconds
            return self._current


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerScheduler(Protocol):
    """Creates repeating timers."""

    def call_every(self, interval: float, callback: TimerCallback) -> TimerHandle:
        ...


class _ThreadTimer:
    def __init__(self, interval: float, callback: TimerCallback) -> None:
        self._interval = interval
        self._callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name="seeksytv-timer", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self._callback()

    def cancel(self) -> None:
        self._stopped.set()


class ThreadingTimerScheduler:
    """Wall-clock repeating timers, one daemon thread per timer."""

    def call_every(self, interval: float, callback: TimerCallback) -> TimerHandle:
        if interval <= 0.0:
            raise ValueError("interval must be greater than zero")
        return _ThreadTimer(interval, callback)


@dataclass
class _SteppedTimer:
    interval: float
    callback: TimerCallback
    next_due: float
    seq: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class SteppedTimerScheduler:
    """Repeating timers driven by a :class:`SteppedMasterClock`.

    :meth:`advance` moves the clock forward, firing every timer that comes due
    on the way in due-time order. Callbacks may cancel timers or create new
    ones; a timer created during a callback first fires one interval after the
    time it was created.
    """

    def __init__(self, clock: SteppedMasterClock | None = None) -> None:
        self.clock = clock or SteppedMasterClock()
        self._timers: list[_SteppedTimer] = []
        self._seq = 0

    def call_every(self, interval: float, callback: TimerCallback) -> TimerHandle:
        if interval <= 0.0:
            raise ValueError("interval must be greater than zero")
        self._seq += 1
        timer = _SteppedTimer(interval, callback, self.clock.now() + interval, self._seq)
        self._timers.append(timer)
        return timer

    @property
    def active_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> float:
        if seconds < 0.0:
            raise ValueError("seconds must be non-negative")
        target = self.clock.now() + seconds
        while True:
            self._timers = [t for t in self._timers if not t.cancelled]
            due = [t for t in self._timers if t.next_due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: (t.next_due, t.seq))
            self.clock.advance(max(0.0, timer.next_due - self.clock.now()))
            timer.next_due += timer.interval
            timer.callback()
        self.clock.advance(max(0.0, target - self.clock.now()))
        return self.clock.now()

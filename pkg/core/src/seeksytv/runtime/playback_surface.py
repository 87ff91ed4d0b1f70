"""
Playback surface.

The watch page has exactly one media element. Content and ads are alternate
*sources* of that element, never two elements. :class:`PlaybackSurface` owns
that single handle: ``load_source`` replaces whatever was loaded, resets
position and metadata, and records which mode the source belongs to.

Media events flow back to one bound :class:`SurfaceListener` (the playback
controller).

:class:`SimulatedPlaybackSurface` is a headless implementation driven by
``advance(seconds)``. It is used by the ``watch`` command and by tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Protocol

from seeksytv.infra.exceptions import PlaybackBlockedError
from seeksytv.runtime.ad_types import MediaError, MediaErrorCode, PlayerMode
from seeksytv.runtime.constants import TIME_UPDATE_INTERVAL_SECONDS


class SurfaceListener(Protocol):
    def on_loaded_metadata(self, duration: float) -> None:
        ...

    def on_time_update(self, position: float) -> None:
        ...

    def on_ended(self) -> None:
        ...

    def on_media_error(self, error: MediaError) -> None:
        ...


class PlaybackSurface(ABC):
    """A single media handle whose source is swapped between content and ads."""

    def __init__(self) -> None:
        self._listener: SurfaceListener | None = None
        self._source: str | None = None
        self._mode = PlayerMode.CONTENT
        self._volume = 0.8
        self._muted = False

    # ── listener ────────────────────────────────────────────────────────
    def bind(self, listener: SurfaceListener) -> None:
        if self._listener is not None and self._listener is not listener:
            raise RuntimeError("playback surface already has a listener")
        self._listener = listener

    def unbind(self) -> None:
        self._listener = None

    # ── source ──────────────────────────────────────────────────────────
    @property
    def source(self) -> str | None:
        return self._source

    @property
    def mode(self) -> PlayerMode:
        return self._mode

    def load_source(self, url: str, mode: PlayerMode) -> None:
        """Replace the loaded source. Playback stops and position returns to 0."""
        if not url:
            raise ValueError("source url must be non-empty")
        self._source = url
        self._mode = mode
        self._reload(url)

    @abstractmethod
    def _reload(self, url: str) -> None:
        """Fully reload the handle with ``url`` (position 0, metadata cleared, paused)."""

    # ── transport ───────────────────────────────────────────────────────
    @abstractmethod
    def play(self) -> None:
        """Start playback. Raises PlaybackBlockedError when playback is refused."""

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def seek(self, seconds: float) -> None:
        ...

    @property
    @abstractmethod
    def position(self) -> float:
        ...

    @property
    @abstractmethod
    def duration(self) -> float | None:
        ...

    @property
    @abstractmethod
    def playing(self) -> bool:
        ...

    # ── audio ───────────────────────────────────────────────────────────
    @property
    def volume(self) -> float:
        return self._volume

    def set_volume(self, volume: float) -> None:
        self._volume = min(1.0, max(0.0, volume))

    @property
    def muted(self) -> bool:
        return self._muted

    def set_muted(self, muted: bool) -> None:
        self._muted = muted

    # ── event fan-out for implementations ───────────────────────────────
    def _emit_loaded_metadata(self, duration: float) -> None:
        if self._listener is not None:
            self._listener.on_loaded_metadata(duration)

    def _emit_time_update(self, position: float) -> None:
        if self._listener is not None:
            self._listener.on_time_update(position)

    def _emit_ended(self) -> None:
        if self._listener is not None:
            self._listener.on_ended()

    def _emit_error(self, error: MediaError) -> None:
        if self._listener is not None:
            self._listener.on_media_error(error)


class SimulatedPlaybackSurface(PlaybackSurface):
    """
    Headless surface for simulations and tests.

    Media durations come from ``media_durations`` (by URL) or
    ``default_duration``. Sources listed in ``failing_sources`` report that
    error on the first ``advance`` after loading, the way a media element
    reports load failures asynchronously. With ``autoplay_blocked`` set,
    ``play()`` is refused until :meth:`allow_playback` is called.
    """

    def __init__(
        self,
        media_durations: Mapping[str, float] | None = None,
        failing_sources: Mapping[str, MediaErrorCode] | None = None,
        default_duration: float = 30.0,
        autoplay_blocked: bool = False,
        time_update_interval: float = TIME_UPDATE_INTERVAL_SECONDS,
    ) -> None:
        super().__init__()
        self.media_durations = dict(media_durations or {})
        self.failing_sources = dict(failing_sources or {})
        self.default_duration = default_duration
        self.autoplay_blocked = autoplay_blocked
        self.time_update_interval = time_update_interval
        self.load_history: list[tuple[str, PlayerMode]] = []
        self._position = 0.0
        self._duration: float | None = None
        self._playing = False
        self._pending_error: MediaError | None = None
        self._metadata_pending = False
        self._since_update = 0.0

    def _reload(self, url: str) -> None:
        self.load_history.append((url, self._mode))
        self._position = 0.0
        self._duration = None
        self._playing = False
        self._since_update = 0.0
        code = self.failing_sources.get(url)
        self._pending_error = MediaError(code, f"failed to load {url}") if code else None
        self._metadata_pending = code is None

    def allow_playback(self) -> None:
        self.autoplay_blocked = False

    def play(self) -> None:
        if self._source is None:
            raise PlaybackBlockedError("no source loaded")
        if self.autoplay_blocked:
            raise PlaybackBlockedError("play() refused by autoplay policy")
        if self._duration is not None and self._position >= self._duration:
            self._position = 0.0
        self._playing = True

    def pause(self) -> None:
        self._playing = False

    def seek(self, seconds: float) -> None:
        upper = self._duration if self._duration is not None else seconds
        self._position = min(max(0.0, seconds), upper)

    @property
    def position(self) -> float:
        return self._position

    @property
    def duration(self) -> float | None:
        return self._duration

    @property
    def playing(self) -> bool:
        return self._playing

    def advance(self, seconds: float) -> None:
        """Move media time forward by ``seconds``, emitting media events on the way."""
        source = self._source
        if source is None:
            return

        if self._pending_error is not None:
            error, self._pending_error = self._pending_error, None
            self._playing = False
            self._emit_error(error)
            return

        if self._metadata_pending:
            self._metadata_pending = False
            self._duration = self.media_durations.get(source, self.default_duration)
            marker = len(self.load_history)
            self._emit_loaded_metadata(self._duration)
            if len(self.load_history) != marker:
                return

        if not self._playing or self._duration is None:
            return

        remaining = seconds
        while remaining > 1e-9 and self._playing:
            step = min(remaining, self.time_update_interval - self._since_update)
            remaining -= step
            self._since_update += step
            self._position = min(self._duration, self._position + step)
            reached_end = self._position >= self._duration
            if self._since_update >= self.time_update_interval - 1e-9 or reached_end:
                self._since_update = 0.0
                marker = len(self.load_history)
                self._emit_time_update(self._position)
                if len(self.load_history) != marker:
                    return
            if reached_end:
                self._playing = False
                self._emit_ended()
                return

"""
Playback Mode Controller

Pattern: State Machine + Surface Listener

Decides whether the single playback surface shows content or an ad, swaps
the surface source on every transition, runs the skip gate while an ad is
active, and routes media events to the tracker and the failover handler.

States (see PlaybackState):

    content_idle ──ads resolved, pre-roll──▶ ad_pre ──ended/skip/error──▶ content_playing
         │                                                                    │
         └──play──▶ content_playing ◀──play/pause──▶ content_paused           │
                         │                                                    │
                         └──content ended──▶ ad_post (if post-roll) ──▶ ended
                                        └──▶ ended (no post-roll)

A pre-roll only starts from content_idle: once the viewer has pressed play,
a pre-roll that resolves late is dropped. When autoplay policy refuses
content after a pre-roll, the controller rests in content_paused until the
viewer presses play. Ads never block content: a
failed ad fetch yields an empty plan and a failed ad fails over immediately.

Media callbacks may arrive from other threads (ad resolution runs on an
executor), so every entry point takes the controller lock.
"""

from __future__ import annotations

from threading import RLock
from typing import Callable

from seeksytv.infra.exceptions import AdPlaybackFailure, PlaybackBlockedError, ValidationError
from seeksytv.infra.logging import get_logger
from seeksytv.runtime.ad_types import (
    AdBreakPlan,
    AdContext,
    AdEventType,
    AdPosition,
    ContentItem,
    MediaError,
    PlacementAssignment,
    PlaybackState,
    PlayerMode,
)
from seeksytv.runtime.event_tracker import AdEventTracker
from seeksytv.runtime.failover import FailoverHandler
from seeksytv.runtime.playback_surface import PlaybackSurface
from seeksytv.runtime.skip_gate import SkipGate
from seeksytv.runtime.viewer_session import ViewerSession

_log = get_logger(__name__)

StateListener = Callable[[PlaybackState, PlaybackState], None]


class PlaybackController:
    def __init__(
        self,
        content: ContentItem,
        surface: PlaybackSurface,
        tracker: AdEventTracker,
        skip_gate: SkipGate,
        viewer_session: ViewerSession,
        on_state_change: StateListener | None = None,
    ) -> None:
        self.content = content
        self.surface = surface
        self.tracker = tracker
        self.skip_gate = skip_gate
        self.viewer_session = viewer_session
        self._on_state_change = on_state_change

        self._lock = RLock()
        self._state = PlaybackState.CONTENT_IDLE
        self.history: list[PlaybackState] = [self._state]
        self._plan = AdBreakPlan.empty()
        self._ads_resolved = False
        self._current: PlacementAssignment | None = None
        self._ad_duration: float | None = None
        self._content_duration: float | None = content.duration_seconds
        self._disposed = False
        self._started = False
        self._post_roll_played = False
        self.last_failure: AdPlaybackFailure | None = None
        self._failover = FailoverHandler(tracker, self._finish_ad)

        surface.bind(self)

    # ── introspection ───────────────────────────────────────────────────
    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def mode(self) -> PlayerMode:
        return self._state.mode

    @property
    def plan(self) -> AdBreakPlan:
        return self._plan

    @property
    def ads_resolved(self) -> bool:
        return self._ads_resolved

    @property
    def current_ad(self) -> PlacementAssignment | None:
        return self._current

    @property
    def ad_context(self) -> AdContext | None:
        if self._current is None:
            return None
        return AdContext.for_assignment(self._current, self.content, self.viewer_session.session_id)

    @property
    def can_skip(self) -> bool:
        return self.mode is PlayerMode.AD and self.skip_gate.can_skip

    @property
    def skip_remaining_seconds(self) -> int:
        return self.skip_gate.remaining_seconds

    @property
    def ad_duration(self) -> float | None:
        return self._ad_duration

    @property
    def content_duration(self) -> float | None:
        return self._content_duration

    @property
    def progress_percent(self) -> float:
        """Content progress (0-100); ads do not move the content progress bar."""
        if self.mode is PlayerMode.AD or not self._content_duration:
            return 0.0
        return min(100.0, self.surface.position / self._content_duration * 100.0)

    # ── lifecycle ───────────────────────────────────────────────────────
    def start(self) -> None:
        """Load the content source, paused, ready for a pre-roll or for play."""
        with self._lock:
            if self._started or self._disposed:
                return
            self._started = True
            self.surface.load_source(self.content.video_url, PlayerMode.CONTENT)

    def dispose(self) -> None:
        """Stop timers and ignore every later callback."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self.skip_gate.stop()
            self.surface.pause()
            self.surface.unbind()
            _log.info("playback_disposed", content_id=self.content.id, state=self._state.value)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def on_ads_resolved(self, plan: AdBreakPlan) -> None:
        with self._lock:
            if self._disposed:
                return
            self._plan = plan
            self._ads_resolved = True
            if plan.pre is None:
                return
            if self._state is PlaybackState.CONTENT_IDLE:
                self._begin_ad(plan.pre)
            else:
                _log.info(
                    "late_pre_roll_dropped",
                    content_id=self.content.id,
                    ad_id=plan.pre.ad.id,
                    state=self._state.value,
                )

    # ── viewer controls ─────────────────────────────────────────────────
    def play(self) -> bool:
        """Play content (or resume an ad whose autoplay was refused)."""
        with self._lock:
            if self._disposed:
                return False
            if self.mode is PlayerMode.AD:
                if not self.surface.playing:
                    self._safe_play()
                return self.surface.playing
            if self._state is PlaybackState.ENDED:
                # Replay: content only, no further ads this session
                self.surface.load_source(self.content.video_url, PlayerMode.CONTENT)
            if self._safe_play():
                self._set_state(PlaybackState.CONTENT_PLAYING)
                return True
            return False

    def pause(self) -> bool:
        with self._lock:
            if self._disposed or self._state is not PlaybackState.CONTENT_PLAYING:
                return False
            self.surface.pause()
            self._set_state(PlaybackState.CONTENT_PAUSED)
            return True

    def toggle_play(self) -> bool:
        with self._lock:
            if self._state is PlaybackState.CONTENT_PLAYING:
                return self.pause()
            return self.play()

    def seek(self, seconds: float) -> bool:
        with self._lock:
            if self._disposed or self.mode is PlayerMode.AD or self._state is PlaybackState.ENDED:
                return False
            self.surface.seek(seconds)
            return True

    def set_volume(self, volume: float) -> None:
        with self._lock:
            self.surface.set_volume(volume)
            self.surface.set_muted(self.surface.volume == 0.0)

    def toggle_mute(self) -> bool:
        with self._lock:
            self.surface.set_muted(not self.surface.muted)
            return self.surface.muted

    def skip(self) -> bool:
        """Skip the active ad. Ignored while the skip gate is locked."""
        with self._lock:
            if self._disposed or not self.can_skip:
                return False
            context = self.ad_context
            if context is None:
                return False
            at_second = self.surface.position
            self.tracker.log_event(AdEventType.SKIP, context, at_second=at_second)
            _log.info("ad_skipped", ad_id=context.ad_id, position=context.position.value, at_second=at_second)
            self._finish_ad()
            return True

    def click_ad(self) -> str | None:
        """Open the active ad's click-through in a new browsing context."""
        with self._lock:
            context = self.ad_context
            if context is None or self._current is None or not self._current.ad.click_url:
                return None
            try:
                return self.tracker.click_through(context, self._current.ad.click_url)
            except ValidationError as exc:
                _log.warning("ad_click_rejected", ad_id=context.ad_id, error=str(exc))
                return None

    # ── surface listener ────────────────────────────────────────────────
    def on_loaded_metadata(self, duration: float) -> None:
        with self._lock:
            if self._disposed:
                return
            if self.mode is PlayerMode.AD:
                self._ad_duration = duration
            else:
                self._content_duration = duration

    def on_time_update(self, position: float) -> None:
        with self._lock:
            if self._disposed or self.mode is not PlayerMode.AD:
                return
            context = self.ad_context
            if context is None:
                return
            duration = self._ad_duration or context.duration_seconds
            self.tracker.track_progress(context, position, duration)

    def on_ended(self) -> None:
        with self._lock:
            if self._disposed:
                return
            if self.mode is PlayerMode.AD:
                context = self.ad_context
                if context is not None:
                    self.tracker.log_event(AdEventType.COMPLETE, context)
                self._finish_ad()
                return
            if self._plan.post is not None and not self._post_roll_played:
                self._post_roll_played = True
                self._begin_ad(self._plan.post)
            else:
                self._set_state(PlaybackState.ENDED)

    def on_media_error(self, error: MediaError) -> None:
        with self._lock:
            if self._disposed:
                return
            if self.mode is PlayerMode.AD:
                self.last_failure = self._failover.handle(error, self.ad_context)
            else:
                _log.error("content_media_error", content_id=self.content.id, code=int(error.code))

    # ── transitions ─────────────────────────────────────────────────────
    def _begin_ad(self, assignment: PlacementAssignment) -> None:
        self._current = assignment
        self._ad_duration = None
        self.tracker.reset()
        self.skip_gate.start()
        self._swap_source(assignment.ad.asset_url, PlayerMode.AD)
        self._set_state(
            PlaybackState.AD_PRE if assignment.position is AdPosition.PRE else PlaybackState.AD_POST
        )

        context = self.ad_context
        assert context is not None
        self.tracker.log_impression(context)
        self.tracker.log_event(AdEventType.START, context)
        _log.info(
            "ad_break_started",
            ad_id=assignment.ad.id,
            placement_id=assignment.placement_id,
            position=assignment.position.value,
        )

    def _finish_ad(self) -> None:
        """Natural completion, skip and failover all end the ad here."""
        assignment = self._current
        if assignment is None:
            return
        self.skip_gate.stop()
        self.tracker.reset()
        self._current = None
        self._ad_duration = None

        if assignment.position is AdPosition.PRE:
            # Pre-roll never resumes mid-content: content always starts from 0
            if self._swap_source(self.content.video_url, PlayerMode.CONTENT):
                self._set_state(PlaybackState.CONTENT_PLAYING)
            else:
                self._set_state(PlaybackState.CONTENT_PAUSED)
        else:
            self.surface.load_source(self.content.video_url, PlayerMode.CONTENT)
            self._set_state(PlaybackState.ENDED)

    def _swap_source(self, url: str, mode: PlayerMode) -> bool:
        self.surface.load_source(url, mode)
        return self._safe_play()

    def _safe_play(self) -> bool:
        try:
            self.surface.play()
        except PlaybackBlockedError as exc:
            _log.warning("autoplay_blocked", source=self.surface.source, error=str(exc))
            return False
        return True

    def _set_state(self, state: PlaybackState) -> None:
        previous = self._state
        if previous is state:
            return
        self._state = state
        self.history.append(state)
        if self._on_state_change is not None:
            self._on_state_change(previous, state)

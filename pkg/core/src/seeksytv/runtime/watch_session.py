"""
Watch session: one viewer watching one content item, from mount to unmount.

The session is the composition root for the playback runtime. It creates the
per-load :class:`ViewerSession`, wires tracker, skip gate and controller
around the caller's playback surface, and starts ad resolution without
waiting for it. Unmounting stops the skip-gate timer and abandons any ad
resolution still in flight.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Callable

from seeksytv.infra.exceptions import ContentLookupError
from seeksytv.infra.logging import get_logger
from seeksytv.infra.settings import Settings
from seeksytv.infra.supabase import FunctionClient, SupabaseClient
from seeksytv.runtime.ad_resolver import AdFetchResolver
from seeksytv.runtime.ad_types import AdBreakPlan, ContentItem
from seeksytv.runtime.clock import ThreadingTimerScheduler, TimerScheduler
from seeksytv.runtime.constants import DEFAULT_SKIP_DELAY_SECONDS
from seeksytv.runtime.content_catalog import ContentCatalog
from seeksytv.runtime.dispatch import TelemetryDispatcher
from seeksytv.runtime.event_tracker import AdEventTracker, EventListener, Opener
from seeksytv.runtime.playback_controller import PlaybackController, StateListener
from seeksytv.runtime.playback_surface import PlaybackSurface
from seeksytv.runtime.skip_gate import SkipGate
from seeksytv.runtime.viewer_session import ViewerSession

_log = get_logger(__name__)

ContentLookup = Callable[[str], "ContentItem | None"]


class WatchSession:
    def __init__(
        self,
        video_id: str,
        *,
        content_lookup: ContentLookup,
        client: FunctionClient,
        surface: PlaybackSurface,
        scheduler: TimerScheduler,
        dispatcher: TelemetryDispatcher,
        ad_executor: Executor | None = None,
        skip_delay_seconds: int = DEFAULT_SKIP_DELAY_SECONDS,
        opener: Opener | None = None,
        event_listener: EventListener | None = None,
        on_state_change: StateListener | None = None,
    ) -> None:
        self.video_id = video_id
        self._content_lookup = content_lookup
        self._client = client
        self.surface = surface
        self._scheduler = scheduler
        self._dispatcher = dispatcher
        self._ad_executor = ad_executor or dispatcher.executor
        self._skip_delay_seconds = skip_delay_seconds
        self._opener = opener
        self._event_listener = event_listener
        self._on_state_change = on_state_change

        self.viewer_session: ViewerSession | None = None
        self.controller: PlaybackController | None = None
        self._ad_future: Future | None = None
        self._mounted = False
        self._owned_resources: list[Callable[[], None]] = []

    @classmethod
    def from_settings(
        cls,
        video_id: str,
        surface: PlaybackSurface,
        settings: Settings,
        **overrides,
    ) -> WatchSession:
        """
        Production wiring: hosted backend, wall-clock timers, threaded telemetry.

        Anything not passed in ``overrides`` is created here and released by
        :meth:`unmount`.
        """
        owned: list[Callable[[], None]] = []
        options = dict(overrides)
        options.setdefault("surface", surface)
        options.setdefault("skip_delay_seconds", settings.ad_skip_delay_seconds)
        if "scheduler" not in options:
            options["scheduler"] = ThreadingTimerScheduler()
        if "client" not in options or "content_lookup" not in options:
            client = SupabaseClient(
                settings.supabase_url, settings.supabase_anon_key, timeout=settings.http_timeout_seconds
            )
            owned.append(client.close)
            options.setdefault("client", client)
            options.setdefault("content_lookup", ContentCatalog(client).get)
        if "dispatcher" not in options:
            dispatcher = TelemetryDispatcher(max_workers=settings.telemetry_workers)
            owned.append(lambda: dispatcher.shutdown(wait=False))
            options["dispatcher"] = dispatcher

        session = cls(video_id, **options)
        session._owned_resources = owned
        return session

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> PlaybackController:
        """
        Look up the content, build the controller and start ad resolution.

        Raises:
            ContentLookupError: If the content does not exist or cannot be loaded
        """
        if self._mounted and self.controller is not None:
            return self.controller

        try:
            content = self._load_content()
        except ContentLookupError:
            self._release_resources()
            raise

        self.viewer_session = ViewerSession.new()
        tracker_options = {"listener": self._event_listener}
        if self._opener is not None:
            tracker_options["opener"] = self._opener
        tracker = AdEventTracker(self._client, self._dispatcher, **tracker_options)
        gate = SkipGate(self._scheduler, delay_seconds=self._skip_delay_seconds)
        self.controller = PlaybackController(
            content,
            self.surface,
            tracker,
            gate,
            self.viewer_session,
            on_state_change=self._on_state_change,
        )
        self.controller.start()
        self._mounted = True
        _log.info(
            "watch_session_mounted",
            content_id=content.id,
            viewer_session_id=self.viewer_session.session_id,
        )

        resolver = AdFetchResolver(self._client, self._ad_executor)
        self._ad_future = resolver.resolve_async(content.id, content.channel_id, self._deliver_plan)
        return self.controller

    def _load_content(self) -> ContentItem:
        content = self._content_lookup(self.video_id)
        if content is None:
            raise ContentLookupError(f"Video not found: {self.video_id}")
        if not content.video_url:
            raise ContentLookupError(f"Video has no playable source: {self.video_id}")
        return content

    def _deliver_plan(self, plan: AdBreakPlan) -> None:
        # A late result after unmount is abandoned
        if not self._mounted or self.controller is None:
            _log.info("ad_plan_abandoned", video_id=self.video_id)
            return
        self.controller.on_ads_resolved(plan)

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._mounted = False
        if self._ad_future is not None:
            self._ad_future.cancel()
        if self.controller is not None:
            self.controller.dispose()
        self._release_resources()
        _log.info("watch_session_unmounted", video_id=self.video_id)

    def _release_resources(self) -> None:
        owned, self._owned_resources = self._owned_resources, []
        for release in owned:
            release()

    def __enter__(self) -> PlaybackController:
        return self.mount()

    def __exit__(self, *exc_info) -> None:
        self.unmount()

"""
Ad Event Tracker

Reports the lifecycle of whichever ad is active: start, quartile progress,
complete, skip, error and click. Events and impressions are posted through
the telemetry dispatcher and never block playback. Clicks are not posted:
they go through the click-redirect function, which records the click and
forwards the viewer to the advertiser.
"""

from __future__ import annotations

import webbrowser
from typing import Any, Callable
from urllib.parse import urlencode, urlparse

from seeksytv.infra.exceptions import ValidationError
from seeksytv.infra.logging import get_logger
from seeksytv.infra.supabase import FunctionClient
from seeksytv.runtime.ad_types import QUARTILE_EVENTS, AdContext, AdEventType
from seeksytv.runtime.constants import (
    CLICK_REDIRECT_FUNCTION,
    LOG_AD_EVENT_FUNCTION,
    LOG_IMPRESSION_FUNCTION,
    QUARTILE_THRESHOLDS,
)
from seeksytv.runtime.dispatch import TelemetryDispatcher
from seeksytv.shared.schemas import AdEventPayload, ImpressionPayload

_log = get_logger(__name__)

Opener = Callable[[str], Any]
EventListener = Callable[[AdEventType, dict[str, Any]], None]


class QuartileTracker:
    """Fires each quartile at most once per ad instance, in order."""

    def __init__(self) -> None:
        self._fired: set[AdEventType] = set()

    def reset(self) -> None:
        self._fired.clear()

    def crossed(self, position: float, duration: float) -> list[AdEventType]:
        """Quartiles newly reached at ``position``; several if playback jumped."""
        if duration <= 0:
            return []
        progress = position / duration
        reached = []
        for threshold, event in zip(QUARTILE_THRESHOLDS, QUARTILE_EVENTS):
            if progress >= threshold and event not in self._fired:
                self._fired.add(event)
                reached.append(event)
        return reached


def _validate_destination(destination: str) -> None:
    parsed = urlparse(destination)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Click destination must be an http(s) URL: {destination!r}")


class AdEventTracker:
    def __init__(
        self,
        client: FunctionClient,
        dispatcher: TelemetryDispatcher,
        opener: Opener = webbrowser.open_new_tab,
        listener: EventListener | None = None,
    ) -> None:
        self._client = client
        self._dispatcher = dispatcher
        self._opener = opener
        self._listener = listener
        self._quartiles = QuartileTracker()

    def reset(self) -> None:
        """Start tracking a new ad instance."""
        self._quartiles.reset()

    def log_event(
        self,
        event_type: AdEventType,
        context: AdContext,
        *,
        at_second: float | None = None,
        error_code: str | None = None,
        destination: str | None = None,
    ) -> dict[str, Any] | str:
        """
        Report one lifecycle event for the active ad.

        Returns:
            The posted body, or for CLICK the redirect URL that was opened

        Raises:
            ValidationError: CLICK without a valid http(s) destination
        """
        if event_type is AdEventType.CLICK:
            if destination is None:
                raise ValidationError("click events need a destination")
            return self.click_through(context, destination)

        body = AdEventPayload(
            event_type=event_type.value,
            ad_id=context.ad_id,
            placement_id=context.placement_id,
            video_id=context.video_id,
            channel_id=context.channel_id,
            position=context.position.value,
            viewer_session_id=context.viewer_session_id,
            duration_seconds=context.duration_seconds,
            at_second=at_second,
            error_code=error_code,
        ).to_wire()
        self._emit(event_type, body)
        self._dispatcher.submit(
            f"ad_event:{event_type.value}", self._client.invoke, LOG_AD_EVENT_FUNCTION, body
        )
        return body

    def log_impression(self, context: AdContext) -> dict[str, Any]:
        body = ImpressionPayload(
            ad_id=context.ad_id,
            placement_id=context.placement_id,
            video_id=context.video_id,
            channel_id=context.channel_id,
            position=context.position.value,
            viewer_session_id=context.viewer_session_id,
        ).model_dump()
        self._dispatcher.submit("impression", self._client.invoke, LOG_IMPRESSION_FUNCTION, body)
        return body

    def track_progress(self, context: AdContext, position: float, duration: float) -> list[AdEventType]:
        """Emit any quartile reached at ``position``."""
        reached = self._quartiles.crossed(position, duration)
        for event in reached:
            self.log_event(event, context, at_second=position)
        return reached

    def click_redirect_url(self, context: AdContext, destination: str) -> str:
        """Trackable URL that records the click and redirects to ``destination``."""
        _validate_destination(destination)
        params = {
            "adId": context.ad_id,
            "dest": destination,
            "placementId": context.placement_id,
            "videoId": context.video_id,
            "channelId": context.channel_id,
            "position": context.position.value,
            "sessionId": context.viewer_session_id,
        }
        query = urlencode({k: v for k, v in params.items() if v})
        return f"{self._client.functions_url(CLICK_REDIRECT_FUNCTION)}?{query}"

    def click_through(self, context: AdContext, destination: str) -> str:
        """Open the redirect URL in a new browsing context; the current page is kept."""
        url = self.click_redirect_url(context, destination)
        self._emit(AdEventType.CLICK, {"adId": context.ad_id, "url": url})
        self._opener(url)
        return url

    def _emit(self, event_type: AdEventType, body: dict[str, Any]) -> None:
        _log.info("ad_event", event_type=event_type.value, ad_id=body.get("adId"))
        if self._listener is not None:
            self._listener(event_type, body)

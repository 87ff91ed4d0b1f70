"""
Ad Fetch Resolver

Asks the ad-decision function for a pre-roll and post-roll assignment for one
content item. Playback must never wait on ad availability, so every failure
degrades to an empty plan: the viewer simply gets content.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from threading import Lock
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from seeksytv.infra.exceptions import AdFetchFailure, FunctionInvocationError
from seeksytv.infra.logging import get_logger
from seeksytv.infra.supabase import FunctionClient
from seeksytv.runtime.ad_types import (
    AdBreakPlan,
    AdDescriptor,
    AdMediaType,
    AdPosition,
    PlacementAssignment,
)
from seeksytv.runtime.constants import GET_ADS_FUNCTION
from seeksytv.runtime.dispatch import InlineExecutor
from seeksytv.shared.schemas import AdPayload, AdResolutionRequest, AdResolutionResponse

_log = get_logger(__name__)

PlanCallback = Callable[[AdBreakPlan], None]


_MEDIA_TYPES = {member.value: member for member in AdMediaType}


def _descriptor(payload: AdPayload) -> AdDescriptor:
    return AdDescriptor(
        id=payload.id,
        asset_url=payload.asset_url,
        duration_seconds=payload.duration_seconds,
        # Unknown media types play as video
        type=_MEDIA_TYPES.get(payload.type or "", AdMediaType.VIDEO),
        title=payload.title or "",
        click_url=payload.click_url,
        thumbnail_url=payload.thumbnail_url,
    )


def _parse_ad(raw: dict[str, Any] | None, position: AdPosition) -> AdPayload | None:
    if raw is None:
        return None
    try:
        return AdPayload.model_validate(raw)
    except PydanticValidationError as exc:
        _log.warning("malformed_ad_dropped", ad_id=raw.get("id"), position=position.value, error=str(exc))
        return None


def _assignment(
    raw: dict[str, Any] | None, placement_id: str | None, position: AdPosition
) -> PlacementAssignment | None:
    payload = _parse_ad(raw, position)
    if payload is None:
        return None
    if not placement_id:
        # Without a placement the impression and events cannot be attributed
        _log.warning("ad_without_placement_dropped", ad_id=payload.id, position=position.value)
        return None
    return PlacementAssignment(ad=_descriptor(payload), placement_id=placement_id, position=position)


def plan_from_response(response: AdResolutionResponse) -> AdBreakPlan:
    """Convert the ad-decision response into an AdBreakPlan."""
    return AdBreakPlan(
        pre=_assignment(response.pre_ad, response.pre_placement_id, AdPosition.PRE),
        post=_assignment(response.post_ad, response.post_placement_id, AdPosition.POST),
    )


class AdFetchResolver:
    """
    Resolves the ad break for a content item, once per viewing session.

    Results (including empty ones caused by failures) are cached per
    ``(content_id, channel_id)`` for the lifetime of the resolver.
    """

    def __init__(self, client: FunctionClient, executor: Executor | None = None):
        self._client = client
        self._executor = executor or InlineExecutor()
        self._cache: dict[tuple[str, str | None], AdBreakPlan] = {}
        self._lock = Lock()

    def resolve(self, content_id: str, channel_id: str | None = None) -> AdBreakPlan:
        key = (content_id, channel_id)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            plan = self._fetch(content_id, channel_id)
        except AdFetchFailure as exc:
            _log.warning("ad_fetch_failed", content_id=content_id, error=str(exc))
            plan = AdBreakPlan.empty()

        with self._lock:
            self._cache.setdefault(key, plan)
            return self._cache[key]

    def resolve_async(
        self, content_id: str, channel_id: str | None, callback: PlanCallback
    ) -> Future:
        """Resolve on the executor and hand the plan to ``callback``."""
        future = self._executor.submit(self.resolve, content_id, channel_id)

        def _deliver(done: Future) -> None:
            if done.cancelled():
                return
            callback(done.result())

        future.add_done_callback(_deliver)
        return future

    def _fetch(self, content_id: str, channel_id: str | None) -> AdBreakPlan:
        request = AdResolutionRequest(video_id=content_id, channel_id=channel_id)
        try:
            raw = self._client.invoke(GET_ADS_FUNCTION, request.model_dump())
        except FunctionInvocationError as exc:
            raise AdFetchFailure(f"Ad resolution failed: {exc}", content_id) from exc

        try:
            response = AdResolutionResponse.model_validate(raw)
        except PydanticValidationError as exc:
            raise AdFetchFailure(f"Malformed ad resolution response: {exc}", content_id) from exc

        plan = plan_from_response(response)
        _log.info(
            "ads_resolved",
            content_id=content_id,
            pre_ad=plan.pre.ad.id if plan.pre else None,
            post_ad=plan.post.ad.id if plan.post else None,
        )
        return plan

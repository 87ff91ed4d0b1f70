"""
Failover Handler

Any media error while an ad is on the surface is classified, reported as an
``error`` event, and followed immediately by the same transition used for a
natural ad completion. There is no retry; the viewer sees content as if no ad
had been scheduled.
"""

from __future__ import annotations

from typing import Callable

from seeksytv.infra.exceptions import AdPlaybackFailure
from seeksytv.infra.logging import get_logger
from seeksytv.runtime.ad_types import (
    AdContext,
    AdErrorCode,
    AdEventType,
    MediaError,
    MediaErrorCode,
)
from seeksytv.runtime.event_tracker import AdEventTracker

_log = get_logger(__name__)


def classify_media_error(error: MediaError | None) -> AdErrorCode:
    """Map a media element error onto the reporting classification."""
    if error is None:
        return AdErrorCode.UNKNOWN
    if error.code in (MediaErrorCode.SRC_NOT_SUPPORTED, MediaErrorCode.NETWORK):
        return AdErrorCode.MEDIA_404
    if error.code == MediaErrorCode.DECODE:
        return AdErrorCode.MEDIA_DECODE
    return AdErrorCode.UNKNOWN


class FailoverHandler:
    def __init__(self, tracker: AdEventTracker, resume_content: Callable[[], None]) -> None:
        self._tracker = tracker
        self._resume_content = resume_content

    def handle(self, error: MediaError | None, context: AdContext | None) -> AdPlaybackFailure:
        """Report the failure and hand the surface back to content. Never raises."""
        code = classify_media_error(error)
        failure = AdPlaybackFailure(
            error.message if error and error.message else "ad playback failed",
            code.value,
            ad_id=context.ad_id if context else None,
            position=context.position.value if context else None,
        )
        _log.warning(
            "ad_failover",
            error_code=code.value,
            ad_id=failure.ad_id,
            position=failure.position,
            detail=str(failure),
        )
        try:
            if context is not None:
                self._tracker.log_event(AdEventType.ERROR, context, error_code=code.value)
        finally:
            self._resume_content()
        return failure

"""
Custom exceptions for SeeksyTV operations.

This module provides custom exception classes for the failures that can occur
while resolving, playing and reporting ads. Ad-workflow failures are contained
by the runtime: they are logged and converted into "no ad" behaviour rather
than propagated to the viewer.
"""


class SeeksyTVError(Exception):
    """Base exception for all SeeksyTV errors."""

    pass


class ValidationError(SeeksyTVError):
    """Raised when validation fails."""

    pass


class OperationError(SeeksyTVError):
    """Raised when operation fails."""

    pass


class FunctionInvocationError(OperationError):
    """Raised when a remote edge function or REST call fails."""

    def __init__(self, message: str, function_name: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.function_name = function_name
        self.status_code = status_code


class ContentLookupError(OperationError):
    """Raised when the content catalog cannot be queried."""

    pass


class AdFetchFailure(OperationError):
    """Raised when the ad-decision service cannot resolve ads for a content item."""

    def __init__(self, message: str, content_id: str | None = None):
        super().__init__(message)
        self.content_id = content_id


class AdPlaybackFailure(OperationError):
    """Media element error while an ad was on the playback surface."""

    def __init__(
        self,
        message: str,
        error_code: str,
        ad_id: str | None = None,
        position: str | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.ad_id = ad_id
        self.position = position


class EventLoggingFailure(OperationError):
    """Raised when a best-effort telemetry call fails."""

    def __init__(self, message: str, label: str | None = None):
        super().__init__(message)
        self.label = label


class PlaybackBlockedError(SeeksyTVError):
    """Raised by a playback surface when play() is rejected (e.g. autoplay policy)."""

    pass

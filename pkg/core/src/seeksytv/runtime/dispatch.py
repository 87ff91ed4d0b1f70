"""
Fire-and-forget dispatch of remote calls.

The playback controller never waits on the network. Every remote call goes
through :class:`TelemetryDispatcher`, which submits it to an executor and
converts any failure into a logged :class:`EventLoggingFailure`.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable

from seeksytv.infra.exceptions import EventLoggingFailure
from seeksytv.infra.logging import get_logger

_log = get_logger(__name__)


class InlineExecutor(Executor):
    """Executor that runs each call synchronously in the submitting thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


class TelemetryDispatcher:
    """Submits best-effort remote calls; never raises to the caller."""

    def __init__(self, executor: Executor | None = None, max_workers: int = 2):
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="seeksytv-telemetry"
        )

    @property
    def executor(self) -> Executor:
        return self._executor

    def submit(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Run ``fn`` in the background. The returned future resolves to None on failure."""
        return self._executor.submit(self._guarded, label, fn, *args, **kwargs)

    def _guarded(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            failure = EventLoggingFailure(f"{label} failed: {exc}", label)
            _log.warning("telemetry_failed", label=label, error=str(failure))
            return None

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

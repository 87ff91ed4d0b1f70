"""
Viewer session.

A per-page-load correlation id for telemetry. It is created when a watch
session mounts, handed explicitly to every component that reports events, and
discarded on unmount. It is never persisted and is not an account session.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ViewerSession:
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def new(cls) -> ViewerSession:
        return cls()

"""
Headless watch command.

Plays one content item on a simulated playback surface: ads are resolved by
the real ad-decision service, the skip gate and media time run on simulated
player time, and every state transition and ad event is printed.
"""

from __future__ import annotations

import json
from typing import Any

import typer

from seeksytv.cli import deps
from seeksytv.infra.exceptions import ContentLookupError
from seeksytv.infra.settings import settings
from seeksytv.infra.supabase import RecordingFunctionClient
from seeksytv.runtime.ad_types import AdEventType, PlaybackState, PlayerMode
from seeksytv.runtime.clock import SteppedTimerScheduler
from seeksytv.runtime.constants import GET_ADS_FUNCTION
from seeksytv.runtime.content_catalog import ContentCatalog
from seeksytv.runtime.dispatch import InlineExecutor, TelemetryDispatcher
from seeksytv.runtime.playback_surface import SimulatedPlaybackSurface
from seeksytv.runtime.simulation import PlaybackSimulator
from seeksytv.runtime.watch_session import WatchSession


def watch(
    video_id: str = typer.Argument(..., help="Content id (UUID)"),
    skip_at: float = typer.Option(None, "--skip-at", help="Try to skip each ad once it has played this many seconds"),
    content_seconds: float = typer.Option(None, "--content-seconds", help="Simulated content length (defaults to catalog duration)"),
    max_seconds: float = typer.Option(3600.0, "--max-seconds", help="Stop after this much simulated time"),
    step: float = typer.Option(0.25, "--step", help="Simulation step in seconds"),
    no_telemetry: bool = typer.Option(False, "--no-telemetry", help="Record impressions and events locally instead of posting them"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Simulate a viewer watching content with its pre-roll and post-roll."""
    client = deps.build_client()
    function_client = (
        RecordingFunctionClient(delegate=client, delegated={GET_ADS_FUNCTION}) if no_telemetry else client
    )

    scheduler = SteppedTimerScheduler()
    surface = SimulatedPlaybackSurface()
    simulator = PlaybackSimulator(surface, scheduler, step_seconds=step)
    timeline: list[dict[str, Any]] = []

    def record(kind: str, **fields: Any) -> None:
        entry = {"t": round(simulator.now, 2), "kind": kind, **fields}
        timeline.append(entry)
        if not json_output:
            detail = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None)
            typer.echo(f"[{simulator.now:8.2f}s] {kind:<6} {detail}")

    session: WatchSession | None = None

    def on_state_change(previous: PlaybackState, state: PlaybackState) -> None:
        controller = session.controller if session else None
        if controller is not None and controller.current_ad is not None:
            ad = controller.current_ad.ad
            surface.media_durations.setdefault(ad.asset_url, ad.duration_seconds or surface.default_duration)
        record("state", previous=previous.value, state=state.value)

    def on_event(event_type: AdEventType, body: dict[str, Any]) -> None:
        record("event", event=event_type.value, ad=body.get("adId"), at=body.get("atSecond"), error=body.get("errorCode"))

    def lookup(vid: str):
        item = ContentCatalog(client).get(vid)
        if item is not None:
            length = content_seconds or item.duration_seconds or surface.default_duration
            surface.media_durations[item.video_url] = length
        return item

    session = WatchSession(
        video_id,
        content_lookup=lookup,
        client=function_client,
        surface=surface,
        scheduler=scheduler,
        dispatcher=TelemetryDispatcher(InlineExecutor()),
        ad_executor=InlineExecutor(),
        skip_delay_seconds=settings.ad_skip_delay_seconds,
        opener=lambda url: None,
        event_listener=on_event,
        on_state_change=on_state_change,
    )

    try:
        controller = session.mount()
    except ContentLookupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        if controller.state is PlaybackState.CONTENT_IDLE:
            controller.play()

        def finished() -> bool:
            if (
                skip_at is not None
                and controller.mode is PlayerMode.AD
                and surface.position >= skip_at
            ):
                controller.skip()
            return controller.state is PlaybackState.ENDED

        completed = simulator.run_until(finished, timeout=max_seconds)
        summary = {
            "video_id": video_id,
            "viewer_session_id": session.viewer_session.session_id if session.viewer_session else None,
            "final_state": controller.state.value,
            "completed": completed,
            "states": [s.value for s in controller.history],
            "timeline": timeline,
        }
        if isinstance(function_client, RecordingFunctionClient):
            summary["recorded_calls"] = [name for name, _ in function_client.calls]
    finally:
        session.unmount()

    if json_output:
        typer.echo(json.dumps(summary, indent=2))
    else:
        typer.echo(f"Finished in state {controller.state.value} after {simulator.now:.2f}s")
    if not completed:
        raise typer.Exit(code=2)

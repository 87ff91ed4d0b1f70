"""
Ads command group.

Resolves the ad break for a content item and builds click-tracking URLs.
"""

from __future__ import annotations

import json
from dataclasses import asdict

import typer

from seeksytv.cli import deps
from seeksytv.infra.exceptions import ValidationError
from seeksytv.runtime.ad_resolver import AdFetchResolver
from seeksytv.runtime.ad_types import AdContext, AdPosition, PlacementAssignment
from seeksytv.runtime.dispatch import InlineExecutor, TelemetryDispatcher
from seeksytv.runtime.event_tracker import AdEventTracker

app = typer.Typer(name="ads", help="Ad resolution and click tracking operations")


def _assignment_dict(assignment: PlacementAssignment | None) -> dict | None:
    if assignment is None:
        return None
    data = asdict(assignment)
    data["position"] = assignment.position.value
    data["ad"]["type"] = assignment.ad.type.value
    return data


@app.command("resolve")
def resolve(
    video_id: str = typer.Argument(..., help="Content id"),
    channel_id: str = typer.Option(None, "--channel-id", help="Channel the content airs on"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Ask the ad-decision service for the pre-roll and post-roll of a content item."""
    plan = AdFetchResolver(deps.build_client()).resolve(video_id, channel_id)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "video_id": video_id,
                    "pre": _assignment_dict(plan.pre),
                    "post": _assignment_dict(plan.post),
                },
                indent=2,
            )
        )
        return

    if plan.is_empty:
        typer.echo("No ads scheduled; content plays directly.")
        return
    for label, assignment in (("Pre-roll", plan.pre), ("Post-roll", plan.post)):
        if assignment is None:
            typer.echo(f"{label}: none")
            continue
        ad = assignment.ad
        typer.echo(
            f"{label}: {ad.title or ad.id} [{ad.type.value}, {ad.duration_seconds:.0f}s] "
            f"placement={assignment.placement_id}"
        )


@app.command("click-url")
def click_url(
    ad_id: str = typer.Argument(..., help="Ad id"),
    destination: str = typer.Argument(..., help="Advertiser destination URL"),
    placement_id: str = typer.Option("", "--placement-id", help="Placement id"),
    video_id: str = typer.Option("", "--video-id", help="Content id"),
    channel_id: str = typer.Option(None, "--channel-id", help="Channel id"),
    position: AdPosition = typer.Option(AdPosition.PRE, "--position", help="Ad position"),
    session_id: str = typer.Option("", "--session-id", help="Viewer session id"),
):
    """Print the trackable redirect URL for an ad click (no request is made)."""
    tracker = AdEventTracker(deps.build_client(), TelemetryDispatcher(InlineExecutor()))
    context = AdContext(
        ad_id=ad_id,
        placement_id=placement_id,
        video_id=video_id,
        channel_id=channel_id,
        position=position,
        viewer_session_id=session_id,
        duration_seconds=0.0,
    )
    try:
        typer.echo(tracker.click_redirect_url(context, destination))
    except ValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

"""
Content command group.

Looks up watch-page content and its related items.
"""

from __future__ import annotations

import json
from dataclasses import asdict

import typer

from seeksytv.cli import deps
from seeksytv.infra.exceptions import ContentLookupError
from seeksytv.runtime.content_catalog import ContentCatalog

app = typer.Typer(name="content", help="Content catalog operations")


@app.command("show")
def show(
    video_id: str = typer.Argument(..., help="Content id (UUID)"),
    related: bool = typer.Option(False, "--related", help="Also list related published items"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Show one content item and its channel."""
    catalog = ContentCatalog(deps.build_client())
    try:
        item = catalog.get(video_id)
        related_items = catalog.related(video_id) if (item and related) else []
    except ContentLookupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if item is None:
        if json_output:
            typer.echo(json.dumps({"status": "not_found", "video_id": video_id}, indent=2))
        else:
            typer.echo(f"Video not found: {video_id}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        payload = {"status": "ok", "content": asdict(item)}
        if related:
            payload["related"] = [asdict(r) for r in related_items]
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"{item.title} ({item.id})")
    typer.echo(f"  Channel: {item.display_channel_name}")
    typer.echo(f"  Source:  {item.video_url}")
    if item.duration_seconds is not None:
        typer.echo(f"  Length:  {item.duration_seconds:.0f}s")
    if related:
        typer.echo("Related:")
        for r in related_items:
            typer.echo(f"  - {r.title} ({r.id})")

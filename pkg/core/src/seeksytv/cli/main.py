"""
Main CLI application using Typer with router-based command dispatch.

This module provides the command-line interface for SeeksyTV, calling the
playback runtime and outputting JSON when requested.
"""

from __future__ import annotations

import typer

from seeksytv.infra.logging import configure_logging

from .commands import ads, content, watch
from .router import CliRouter

app = typer.Typer(help="SeeksyTV playback CLI")

router = CliRouter(app)

router.register(
    "content",
    content.app,
    help_text="Content catalog operations",
)

router.register(
    "ads",
    ads.app,
    help_text="Ad resolution and click tracking operations",
)

app.command("watch")(watch.watch)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """SeeksyTV playback tools."""
    configure_logging(log_level)


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()

#!/usr/bin/env python3
"""
CLI entry point for seeksytv.cli module.

This allows running: python -m seeksytv.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()

"""Command-line interface for slmio.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Format selection by registered mode name
- Conversion with optional layer sorting and lazy loading
- Build file inspection (header, parts, aggregates)
"""

from slmio.cli.app import app, cli, main

__all__ = ["app", "cli", "main"]

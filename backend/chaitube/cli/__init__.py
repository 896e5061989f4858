"""Command-line interface registration for the chaitube application."""

from __future__ import annotations

from flask import Flask

from .seed import seed_cli


def init_app(app: Flask) -> None:
    """Register the ``flask seed`` command group on ``app``."""
    app.cli.add_command(seed_cli)

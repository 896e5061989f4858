"""Expose the application factory at package level.

``from chaitube import create_app`` is the entry point used by the Flask CLI,
gunicorn and the test-suite.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]

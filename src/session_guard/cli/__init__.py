"""Command-line interface."""

from session_guard.cli.app import app

__all__ = ["app"]

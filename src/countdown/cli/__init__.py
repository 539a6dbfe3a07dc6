"""Command-line interface."""

from countdown.cli.app import app

__all__ = ["app"]

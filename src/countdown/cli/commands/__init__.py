"""CLI command modules."""

from countdown.cli.commands import config, show, watch

__all__ = [
    "config",
    "show",
    "watch",
]

"""CLI commands for dabox."""

from dabox.cli.commands import directory

__all__ = ["directory"]

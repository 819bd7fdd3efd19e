"""Command line entry point."""

from riven_tui.cli.main import app, run

__all__ = ["app", "run"]

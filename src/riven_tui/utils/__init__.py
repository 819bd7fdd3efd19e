"""Utility helpers."""

from riven_tui.utils.logging import (
    configure_cli_logging,
    configure_from_settings,
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_cli_logging",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
]

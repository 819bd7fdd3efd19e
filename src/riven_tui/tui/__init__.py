"""Terminal user interface: router, runtime, screens and the Textual app."""

from riven_tui.tui.router import handle, initialize, render
from riven_tui.tui.state import AppState, Toast
from riven_tui.tui.types import Resource, ScreenId, ViewState

__all__ = [
    "AppState",
    "Resource",
    "ScreenId",
    "Toast",
    "ViewState",
    "handle",
    "initialize",
    "render",
]

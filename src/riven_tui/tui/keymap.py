"""Key bindings, shared by the router and the help screen."""

from __future__ import annotations

from dataclasses import dataclass

from riven_tui.tui.types import ScreenId

QUIT_KEYS = frozenset({"q", "ctrl+c"})
HELP_KEY = "?"

# Global keys that switch screens.
SCREEN_KEYS: dict[str, ScreenId] = {
    "d": ScreenId.DASHBOARD,
    "m": ScreenId.ITEMS,
    "s": ScreenId.SETTINGS,
    "l": ScreenId.LOGS,
    "e": ScreenId.EVENTS,
}


@dataclass(frozen=True)
class KeyHelp:
    keys: str
    description: str


HELP_SECTIONS: dict[str, list[KeyHelp]] = {
    "Global": [
        KeyHelp("d", "Dashboard"),
        KeyHelp("m", "Media items"),
        KeyHelp("s", "Settings"),
        KeyHelp("l", "Logs"),
        KeyHelp("e", "Live events"),
        KeyHelp("?", "Toggle help"),
        KeyHelp("q / ctrl+c", "Quit"),
    ],
    "Media items": [
        KeyHelp("↑/k ↓/j", "Move cursor"),
        KeyHelp("enter", "Open item details"),
        KeyHelp("/ or ctrl+f", "Search"),
        KeyHelp("n/→ p/←", "Next / previous page"),
        KeyHelp("1-9", "Jump to page"),
        KeyHelp("f", "Cycle state filter"),
        KeyHelp("o", "Cycle sort order"),
        KeyHelp("t", "Cycle media type"),
        KeyHelp("c", "Clear filters"),
        KeyHelp("space", "Select row"),
        KeyHelp("a", "Actions: r retry, x reset, p pause, u unpause, d remove"),
        KeyHelp("r", "Refresh"),
    ],
    "Item details": [
        KeyHelp("tab / shift+tab", "Next / previous tab"),
        KeyHelp("1 2 3", "Details, Streams, Actions"),
        KeyHelp("↑ ↓ enter", "Choose and run an action"),
        KeyHelp("esc", "Back to media items"),
        KeyHelp("r", "Refresh"),
    ],
    "Other screens": [
        KeyHelp("r", "Refresh (dashboard, settings, logs)"),
        KeyHelp("↑ ↓ home end", "Scroll logs, pick settings section"),
        KeyHelp("r p c", "Events: restart, pause/resume, clear"),
    ],
}


def normalize_key(key: str, character: str | None) -> str:
    """Map a Textual key event to the names the screens match on.

    Printable characters are matched by the character itself (``?``, ``/``),
    everything else by Textual's key name (``enter``, ``ctrl+c``).
    """
    if key == "space":
        return key
    if key.startswith("ctrl+"):
        return key
    if character and len(character) == 1 and character.isprintable():
        return character
    return key

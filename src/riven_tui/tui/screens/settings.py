"""Settings overview: the service's settings tree, one section at a time."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import Resource, ScreenId

KNOWN_SECTIONS = ("general", "scraping", "content", "downloaders", "indexers")


def section_names(tree: dict[str, Any]) -> list[str]:
    """Known sections first (when present), then the rest alphabetically."""
    known = [name for name in KNOWN_SECTIONS if name in tree]
    others = sorted(name for name in tree if name not in KNOWN_SECTIONS)
    return known + others


def count_keys(value: Any) -> int:
    if isinstance(value, dict):
        return len(value)
    if isinstance(value, list):
        return len(value)
    return 1


class SettingsModel(ScreenModel):
    SCREEN_ID = ScreenId.SETTINGS
    SCREEN_TITLE = "Settings"
    RESOURCES = (Resource.SETTINGS,)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings: dict[str, Any] | None = None
        self.cursor = 0

    @property
    def refresh_seconds(self) -> float:
        return self.ui.settings_refresh

    @property
    def has_content(self) -> bool:
        return self.settings is not None

    @property
    def sections(self) -> list[str]:
        return section_names(self.settings or {})

    @property
    def selected_section(self) -> str | None:
        sections = self.sections
        if not sections:
            return None
        return sections[min(self.cursor, len(sections) - 1)]

    def apply(self, resource: Resource, data) -> None:
        self.settings = data
        self.cursor = min(self.cursor, max(len(self.sections) - 1, 0))

    def on_key(self, key, msg):
        if key in ("up", "k"):
            self.cursor = max(self.cursor - 1, 0)
            return []
        if key in ("down", "j"):
            self.cursor = min(self.cursor + 1, max(len(self.sections) - 1, 0))
            return []
        return super().on_key(key, msg)

    def render_content(self) -> RenderableType:
        overview = Table(title="Settings Overview", title_justify="left", expand=False)
        overview.add_column("Section", style="bold")
        overview.add_column("Keys", justify="right")
        selected = self.selected_section
        for name in self.sections:
            style = self.theme.selected if name == selected else ""
            overview.add_row(name, str(count_keys(self.settings[name])), style=style)

        parts: list[RenderableType] = [overview]
        if selected is not None:
            body = json.dumps(self.settings[selected], indent=2, sort_keys=True, default=str)
            lines = body.splitlines()
            limit = max(self.height - len(self.sections) - 10, 5) if self.height else len(lines)
            if len(lines) > limit:
                lines = lines[:limit] + ["..."]
            parts.append(
                Panel(
                    Syntax("\n".join(lines), "json", word_wrap=True),
                    title=selected,
                    title_align="left",
                    border_style=self.theme.primary,
                )
            )
        parts.append(Text("↑/↓ select section • r refresh", style=self.theme.muted))
        parts.append(self.status_line())
        return Group(*parts)

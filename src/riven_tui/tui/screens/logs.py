"""Logs screen: the service's recent log lines, following the tail."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.text import Text

from riven_tui.models import LogsResponse
from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import Resource, ScreenId

# Header, footer and status lines around the viewport.
CHROME_LINES = 6


class LogsModel(ScreenModel):
    SCREEN_ID = ScreenId.LOGS
    SCREEN_TITLE = "Logs"
    RESOURCES = (Resource.LOGS,)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.lines: list[str] | None = None
        self.offset = 0

    @property
    def has_content(self) -> bool:
        return self.lines is not None

    @property
    def page_size(self) -> int:
        return max(self.height - CHROME_LINES, 1)

    @property
    def max_offset(self) -> int:
        return max(len(self.lines or []) - self.page_size, 0)

    def apply(self, resource: Resource, data: LogsResponse) -> None:
        self.lines = list(data.logs)
        self.offset = self.max_offset

    def set_size(self, width: int, height: int) -> None:
        at_bottom = self.offset >= self.max_offset
        super().set_size(width, height)
        self.offset = self.max_offset if at_bottom else min(self.offset, self.max_offset)

    def on_key(self, key, msg):
        moves = {
            "up": -1,
            "k": -1,
            "down": 1,
            "j": 1,
            "pageup": -self.page_size,
            "pagedown": self.page_size,
        }
        if key in moves:
            self.offset = min(max(self.offset + moves[key], 0), self.max_offset)
            return []
        if key in ("home", "g"):
            self.offset = 0
            return []
        if key in ("end", "G"):
            self.offset = self.max_offset
            return []
        return super().on_key(key, msg)

    def render_content(self) -> RenderableType:
        lines = self.lines or []
        if not lines:
            body = Text("No logs available", style=self.theme.muted)
        else:
            visible = lines[self.offset : self.offset + self.page_size]
            body = Text("\n".join(visible), no_wrap=True, overflow="ellipsis")
        footer = Text(
            f"{len(lines)} lines • ↑/↓ scroll • home/end • r refresh",
            style=self.theme.muted,
        )
        return Group(body, footer, self.status_line())

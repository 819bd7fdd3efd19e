"""Help screen listing every key binding."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from riven_tui.tui.keymap import HELP_SECTIONS
from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import ScreenId


class HelpModel(ScreenModel):
    SCREEN_ID = ScreenId.HELP
    SCREEN_TITLE = "Help"

    @property
    def has_content(self) -> bool:
        return True

    def render_content(self) -> RenderableType:
        tables: list[RenderableType] = []
        for section, bindings in HELP_SECTIONS.items():
            table = Table(title=section, title_justify="left", show_header=False, box=None)
            table.add_column(style=f"bold {self.theme.accent}", no_wrap=True)
            table.add_column()
            for binding in bindings:
                table.add_row(binding.keys, binding.description)
            tables.append(table)
            tables.append(Text(""))
        tables.append(Text("Press ? to go back", style=self.theme.muted))
        return Group(*tables)

"""Item detail screen: metadata, streams and per-item commands."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from riven_tui.models import ItemAction, MediaItem, Stream
from riven_tui.tui.messages import CommandFinished, Key
from riven_tui.tui.ops import Op, RunCommand
from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import Resource, ScreenId

TABS = ("Details", "Streams", "Actions")
DETAILS_TAB, STREAMS_TAB, ACTIONS_TAB = range(len(TABS))

ACTIONS = (
    ItemAction.RETRY,
    ItemAction.RESET,
    ItemAction.PAUSE,
    ItemAction.UNPAUSE,
    ItemAction.REMOVE,
)

ACTION_DESCRIPTIONS = {
    ItemAction.RETRY: "Retry item processing",
    ItemAction.RESET: "Reset item state",
    ItemAction.PAUSE: "Pause item",
    ItemAction.UNPAUSE: "Unpause item",
    ItemAction.REMOVE: "Remove item from the library",
}

CHROME_LINES = 12


class ItemDetailModel(ScreenModel):
    """One visit to one item.

    ``visit`` tags every op this instance emits so results that arrive after
    the user left (or reopened another item) can be told apart.
    """

    SCREEN_ID = ScreenId.ITEM_DETAIL
    SCREEN_TITLE = "Item Details"
    RESOURCES = (Resource.ITEM, Resource.ITEM_STREAMS)
    OPTIONAL_RESOURCES = frozenset({Resource.ITEM_STREAMS})

    def __init__(self, item_id: str, visit: int, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.item_id = item_id
        self.visit = visit
        self.item: MediaItem | None = None
        self.streams: list[Stream] | None = None
        self.tab = DETAILS_TAB
        self.stream_cursor = 0
        self.action_cursor = 0
        self.confirming_remove = False

    @property
    def refresh_seconds(self) -> float:
        return self.ui.detail_refresh

    @property
    def timer_token(self) -> int:
        return self.visit

    @property
    def has_content(self) -> bool:
        return self.item is not None

    @property
    def captures_input(self) -> bool:
        return self.confirming_remove

    @property
    def selected_action(self) -> ItemAction:
        return ACTIONS[self.action_cursor]

    def fetch_ops(self) -> list[Op]:
        return [
            self.request(Resource.ITEM, visit=self.visit, item_id=self.item_id),
            self.request(Resource.ITEM_STREAMS, visit=self.visit, item_id=self.item_id),
        ]

    def apply(self, resource: Resource, data) -> None:
        if resource is Resource.ITEM:
            self.item = data
            if self.streams is None and data.streams:
                self.streams = list(data.streams)
        else:
            self.streams = list(data)
        if self.streams:
            self.stream_cursor = min(self.stream_cursor, len(self.streams) - 1)

    def on_key(self, key: str, msg: Key) -> list[Op]:
        if self.confirming_remove:
            if key == "y":
                self.confirming_remove = False
                return [self._command(ItemAction.REMOVE)]
            if key in ("n", "escape"):
                self.confirming_remove = False
            return []
        if key == "tab":
            self.tab = (self.tab + 1) % len(TABS)
            return []
        if key == "shift+tab":
            self.tab = (self.tab - 1) % len(TABS)
            return []
        if key in ("1", "2", "3"):
            self.tab = int(key) - 1
            return []
        if key in ("up", "k", "down", "j"):
            self._move(-1 if key in ("up", "k") else 1)
            return []
        if key == "enter" and self.tab == ACTIONS_TAB:
            if self.selected_action is ItemAction.REMOVE:
                self.confirming_remove = True
                return []
            return [self._command(self.selected_action)]
        return super().on_key(key, msg)

    def _move(self, delta: int) -> None:
        if self.tab == STREAMS_TAB and self.streams:
            self.stream_cursor = min(max(self.stream_cursor + delta, 0), len(self.streams) - 1)
        elif self.tab == ACTIONS_TAB:
            self.action_cursor = min(max(self.action_cursor + delta, 0), len(ACTIONS) - 1)

    def _command(self, action: ItemAction) -> RunCommand:
        return RunCommand(self.SCREEN_ID, action, (self.item_id,), visit=self.visit)

    def on_command_finished(self, msg: CommandFinished) -> list[Op]:
        if not msg.ok or msg.action is ItemAction.REMOVE:
            return []
        if self.item_id not in msg.ids:
            return []
        return [self.request(Resource.ITEM, visit=self.visit, item_id=self.item_id)]

    # -- rendering --------------------------------------------------------

    def _title(self) -> Text:
        title = self.item.title if self.item is not None and self.item.title else self.item_id
        return Text(f"Item: {title}", style=self.theme.header)

    def _tabs(self) -> Text:
        tabs = Text()
        for index, name in enumerate(TABS):
            style = f"bold reverse {self.theme.primary}" if index == self.tab else self.theme.muted
            tabs.append(f" {name} ({index + 1}) ", style=style)
            tabs.append(" ")
        return tabs

    def render_loading(self) -> RenderableType:
        return Group(self._title(), Text(f"Loading item {self.item_id}...", style=self.theme.muted))

    def render_content(self) -> RenderableType:
        if self.tab == STREAMS_TAB:
            body = self._streams_tab()
        elif self.tab == ACTIONS_TAB:
            body = self._actions_tab()
        else:
            body = self._details_tab()
        controls = Text(
            "[1-3] tabs [tab] next tab [r] refresh [esc] back", style=self.theme.muted
        )
        return Group(self._title(), self._tabs(), body, controls, self.status_line())

    def _details_tab(self) -> RenderableType:
        item = self.item
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="bold")
        grid.add_column()
        fields = [
            ("ID", item.id),
            ("Type", item.type),
            ("State", Text(item.state.value, style=self.theme.state_color(item.state))),
            ("Year", str(item.year) if item.year is not None else ""),
            ("TMDB ID", item.tmdb_id),
            ("TVDB ID", item.tvdb_id),
            ("IMDB ID", item.imdb_id),
            ("Requested", item.requested_at),
            ("Updated", item.updated_at),
            ("Aired", item.aired_at),
            ("Scraped", f"{item.scraped_at} ({item.scraped_times}x)" if item.scraped_at else ""),
        ]
        if item.season_number is not None:
            fields.append(("Season", str(item.season_number)))
        if item.episode_number is not None:
            fields.append(("Episode", str(item.episode_number)))
        if item.file:
            fields.append(("File", item.file))
        for label, value in fields:
            if value:
                grid.add_row(label, value)
        parts: list[RenderableType] = [grid]
        if item.overview:
            parts.extend([Text(""), Text("Overview:", style="bold"), Text(item.overview)])
        return Panel(Group(*parts), border_style=self.theme.primary)

    def _streams_tab(self) -> RenderableType:
        if not self.streams:
            return Panel(Text("No streams available.", style=self.theme.muted), border_style=self.theme.primary)
        table = Table(expand=True, header_style=self.theme.header)
        table.add_column("Title", ratio=1, no_wrap=True)
        table.add_column("Infohash", no_wrap=True, max_width=16)
        table.add_column("Rank", justify="right")
        table.add_column("Blacklisted")
        size = max(self.height - CHROME_LINES, 3) if self.height else len(self.streams)
        start = max(min(self.stream_cursor - size + 1, len(self.streams) - size), 0)
        for index, stream in enumerate(self.streams[start : start + size], start=start):
            table.add_row(
                stream.label,
                stream.infohash,
                str(stream.rank),
                "yes" if stream.blacklisted else "",
                style=self.theme.selected if index == self.stream_cursor else None,
            )
        return table

    def _actions_tab(self) -> RenderableType:
        lines = Text()
        for index, action in enumerate(ACTIONS):
            pointer = "› " if index == self.action_cursor else "  "
            style = self.theme.selected if index == self.action_cursor else ""
            lines.append(f"{pointer}{action.label:<8} {ACTION_DESCRIPTIONS[action]}\n", style=style)
        if self.confirming_remove:
            lines.append(f"\nRemove item {self.item_id}? [y/n]", style=f"bold {self.theme.error}")
        else:
            lines.append("\n↑/↓ choose • enter run", style=self.theme.muted)
        return Panel(lines, title="Available Actions", title_align="left", border_style=self.theme.primary)

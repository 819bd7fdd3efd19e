"""Media items screen: paginated, filterable listing with bulk commands.

Input modes are driven by a small state machine:

    browsing --/--> searching --enter/esc--> browsing
    browsing --a--> actions --d--> confirm_remove --y/n--> browsing
"""

from __future__ import annotations

from typing import Any

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text
from transitions import Machine

from riven_tui.models import ItemAction, ItemsQuery, ItemsResponse, ItemSummary
from riven_tui.tui.messages import CommandFinished, FetchResult, Key, ShowItemDetail
from riven_tui.tui.ops import Emit, Fetch, Op, RunCommand
from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import Resource, ScreenId

SEARCH_MAX_LENGTH = 100
SEARCH_PLACEHOLDER = "Search media items..."
# Lines taken by search bar, header, status and controls.
CHROME_LINES = 10


class ItemsMode:
    BROWSING = "browsing"
    SEARCHING = "searching"
    ACTIONS = "actions"
    CONFIRM_REMOVE = "confirm_remove"


MODES = [
    ItemsMode.BROWSING,
    ItemsMode.SEARCHING,
    ItemsMode.ACTIONS,
    ItemsMode.CONFIRM_REMOVE,
]

MODE_TRANSITIONS: list[dict[str, Any]] = [
    {"trigger": "open_search", "source": ItemsMode.BROWSING, "dest": ItemsMode.SEARCHING},
    {"trigger": "submit_search", "source": ItemsMode.SEARCHING, "dest": ItemsMode.BROWSING},
    {"trigger": "cancel_search", "source": ItemsMode.SEARCHING, "dest": ItemsMode.BROWSING},
    {"trigger": "open_actions", "source": ItemsMode.BROWSING, "dest": ItemsMode.ACTIONS},
    {"trigger": "close_actions", "source": ItemsMode.ACTIONS, "dest": ItemsMode.BROWSING},
    {"trigger": "ask_remove", "source": ItemsMode.ACTIONS, "dest": ItemsMode.CONFIRM_REMOVE},
    {"trigger": "confirm_remove", "source": ItemsMode.CONFIRM_REMOVE, "dest": ItemsMode.BROWSING},
    {"trigger": "cancel_remove", "source": ItemsMode.CONFIRM_REMOVE, "dest": ItemsMode.BROWSING},
]

ACTION_KEYS = {
    "r": ItemAction.RETRY,
    "x": ItemAction.RESET,
    "p": ItemAction.PAUSE,
    "u": ItemAction.UNPAUSE,
}


class ItemsModel(ScreenModel):
    SCREEN_ID = ScreenId.ITEMS
    SCREEN_TITLE = "Media Items"
    RESOURCES = (Resource.ITEMS, Resource.STATES)
    OPTIONAL_RESOURCES = frozenset({Resource.STATES})

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.query = ItemsQuery(limit=self.ui.page_size)
        self.response: ItemsResponse | None = None
        self.available_states: list[str] = []
        self.cursor = 0
        self.selected: dict[str, None] = {}
        self.draft = ""
        self._machine = Machine(
            model=self,
            states=MODES,
            transitions=MODE_TRANSITIONS,
            initial=ItemsMode.BROWSING,
            model_attribute="mode",
            auto_transitions=False,
            ignore_invalid_triggers=True,
        )

    # -- state ------------------------------------------------------------

    @property
    def refresh_seconds(self) -> float:
        return self.ui.items_refresh

    @property
    def has_content(self) -> bool:
        return self.response is not None

    @property
    def captures_input(self) -> bool:
        return self.mode != ItemsMode.BROWSING

    @property
    def rows(self) -> list[ItemSummary]:
        return self.response.items if self.response is not None else []

    @property
    def current_row(self) -> ItemSummary | None:
        rows = self.rows
        if 0 <= self.cursor < len(rows):
            return rows[self.cursor]
        return None

    @property
    def total_pages(self) -> int:
        return self.response.total_pages if self.response is not None else 0

    def targets(self) -> tuple[str, ...]:
        """Selected ids, or the id under the cursor when nothing is selected."""
        if self.selected:
            return tuple(self.selected)
        row = self.current_row
        return (row.id,) if row is not None else ()

    def fetch_items(self) -> Fetch:
        return self.request(Resource.ITEMS, query=self.query)

    def fetch_ops(self) -> list[Op]:
        return [self.fetch_items(), self.request(Resource.STATES)]

    def _requery(self, query: ItemsQuery) -> list[Op]:
        self.query = query
        self.cursor = 0
        return [self.fetch_items()]

    def on_fetch_result(self, msg: FetchResult) -> list[Op]:
        ops = super().on_fetch_result(msg)
        if not msg.ok or msg.resource is not Resource.ITEMS:
            return ops
        # The library shrank under the current page.
        last_page = max(self.total_pages, 1)
        if self.query.page > last_page:
            ops.extend(self._requery(self.query.with_page(last_page)))
        return ops

    def apply(self, resource: Resource, data) -> None:
        if resource is Resource.STATES:
            self.available_states = list(data.states)
            return
        self.response = data
        if self.rows:
            self.cursor = min(self.cursor, len(self.rows) - 1)
        else:
            self.cursor = 0

    # -- keys -------------------------------------------------------------

    def on_key(self, key: str, msg: Key) -> list[Op]:
        if self.mode == ItemsMode.SEARCHING:
            return self._search_key(key, msg)
        if self.mode == ItemsMode.ACTIONS:
            return self._actions_key(key)
        if self.mode == ItemsMode.CONFIRM_REMOVE:
            return self._confirm_key(key)
        return self._browse_key(key)

    def _browse_key(self, key: str) -> list[Op]:
        if key in ("/", "ctrl+f"):
            self.draft = self.query.search
            self.open_search()
            return []
        if key == "a":
            self.open_actions()
            return []
        if key in ("up", "k"):
            self.cursor = max(self.cursor - 1, 0)
            return []
        if key in ("down", "j"):
            self.cursor = min(self.cursor + 1, max(len(self.rows) - 1, 0))
            return []
        if key == "space":
            row = self.current_row
            if row is not None:
                if row.id in self.selected:
                    del self.selected[row.id]
                else:
                    self.selected[row.id] = None
            return []
        if key in ("n", "right"):
            if self.response is None or self.query.page >= self.total_pages:
                return []
            return self._requery(self.query.with_page(self.query.page + 1))
        if key in ("p", "left"):
            if self.query.page <= 1:
                return []
            return self._requery(self.query.with_page(self.query.page - 1))
        if len(key) == 1 and key in "123456789":
            page = int(key)
            if page > self.total_pages:
                return []
            return self._requery(self.query.with_page(page))
        if key == "f":
            return self._requery(self.query.next_state_filter())
        if key == "o":
            return self._requery(self.query.next_sort())
        if key == "t":
            return self._requery(self.query.next_media_type())
        if key == "c":
            self.selected.clear()
            return self._requery(self.query.cleared())
        if key == "r":
            return self.fetch_ops()
        if key == "enter":
            row = self.current_row
            if row is None or not row.id:
                return []
            return [Emit(ShowItemDetail(row.id))]
        return []

    def _search_key(self, key: str, msg: Key) -> list[Op]:
        if key == "enter":
            self.submit_search()
            return self._requery(self.query.with_search(self.draft.strip()))
        if key == "escape":
            self.draft = ""
            self.cancel_search()
            return []
        if key == "backspace":
            self.draft = self.draft[:-1]
            return []
        char = msg.printable
        if char is not None and len(self.draft) < SEARCH_MAX_LENGTH:
            self.draft += char
        return []

    def _actions_key(self, key: str) -> list[Op]:
        if key in ("escape", "a"):
            self.close_actions()
            return []
        targets = self.targets()
        if not targets:
            return []
        if key in ACTION_KEYS:
            self.close_actions()
            return [RunCommand(self.SCREEN_ID, ACTION_KEYS[key], targets)]
        if key == "d":
            self.ask_remove()
        return []

    def _confirm_key(self, key: str) -> list[Op]:
        if key == "y":
            targets = self.targets()
            self.confirm_remove()
            if not targets:
                return []
            return [RunCommand(self.SCREEN_ID, ItemAction.REMOVE, targets)]
        if key in ("n", "escape"):
            self.cancel_remove()
        return []

    def on_command_finished(self, msg: CommandFinished) -> list[Op]:
        if not msg.ok:
            return []
        for item_id in msg.ids:
            self.selected.pop(item_id, None)
        return [self.fetch_items()]

    # -- rendering --------------------------------------------------------

    def _search_bar(self) -> Text | None:
        if self.mode == ItemsMode.SEARCHING:
            bar = Text("Search: ", style="bold")
            if self.draft:
                bar.append(self.draft)
            else:
                bar.append(SEARCH_PLACEHOLDER, style=self.theme.muted)
            bar.append("█", style=self.theme.accent)
            bar.append("   enter submit • esc cancel", style=self.theme.muted)
            return bar
        if self.query.search:
            return Text(
                f"Search: {self.query.search} (Press / to search again)",
                style=self.theme.muted,
            )
        return None

    def render_error(self) -> RenderableType:
        bar = self._search_bar()
        error = super().render_error()
        return Group(bar, error) if bar is not None else error

    def _visible_window(self) -> tuple[int, int]:
        total = len(self.rows)
        if not self.height:
            return 0, total
        size = max(self.height - CHROME_LINES, 3)
        start = min(max(self.cursor - size + 1, 0), max(total - size, 0))
        if self.cursor < start:
            start = self.cursor
        return start, min(start + size, total)

    def _table(self) -> Table:
        table = Table(expand=True, header_style=self.theme.header, pad_edge=False)
        table.add_column(" ", width=1, no_wrap=True)
        table.add_column("ID", no_wrap=True, max_width=10)
        table.add_column("Title", ratio=1, no_wrap=True)
        table.add_column("Type", no_wrap=True)
        table.add_column("State", no_wrap=True)
        table.add_column("Year", no_wrap=True)
        table.add_column("Updated", no_wrap=True)

        start, end = self._visible_window()
        for index in range(start, end):
            item = self.rows[index]
            marker = "✓" if item.id in self.selected else ""
            table.add_row(
                marker,
                item.id,
                item.short_title,
                item.type,
                Text(item.state.value, style=self.theme.state_color(item.state)),
                str(item.year) if item.year is not None else "",
                item.updated_date,
                style=self.theme.selected if index == self.cursor else None,
            )
        return table

    def _status(self) -> Text:
        parts = []
        if self.query.state is not None:
            parts.append(f"Filter: {self.query.state.value}")
        if self.query.media_type is not None:
            parts.append(f"Type: {self.query.media_type.value}")
        parts.append(f"Sort: {self.query.sort.label}")
        parts.append(f"Page {self.query.page}/{self.total_pages}")
        if self.response is not None:
            parts.append(f"{self.response.total_items} items")
        if self.selected:
            parts.append(f"{len(self.selected)} selected")
        if self.loading:
            parts.append("Refreshing...")
        return Text(" | ".join(parts), style=self.theme.muted)

    def _mode_bar(self) -> Text:
        if self.mode == ItemsMode.ACTIONS:
            count = len(self.targets())
            return Text(
                f"Actions ({count} item{'s' if count != 1 else ''}): "
                "[r]etry [x] reset [p]ause [u]npause [d] remove [esc] close",
                style=f"bold {self.theme.warning}",
            )
        if self.mode == ItemsMode.CONFIRM_REMOVE:
            count = len(self.targets())
            return Text(
                f"Remove {count} item{'s' if count != 1 else ''}? [y/n]",
                style=f"bold {self.theme.error}",
            )
        return Text(
            "[/] search [f] filter [o] sort [t] type [c] clear [n/p] page "
            "[space] select [a] actions [enter] details",
            style=self.theme.muted,
        )

    def render_content(self) -> RenderableType:
        parts: list[RenderableType] = []
        bar = self._search_bar()
        if bar is not None:
            parts.append(bar)
        if self.rows:
            parts.append(self._table())
        else:
            parts.append(Text("No items found", style=self.theme.muted))
        parts.append(self._status())
        parts.append(self._mode_bar())
        return Group(*parts)

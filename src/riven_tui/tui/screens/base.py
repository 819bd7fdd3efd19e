"""Base class for screen models.

A screen model owns the data, loading/error flags and widget-local state of
one screen. It never performs I/O: ``init`` and ``handle`` return ops for the
runtime, ``render`` builds a rich renderable from the current state.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Group, RenderableType
from rich.text import Text

from riven_tui.config.settings import UISettings
from riven_tui.tui.messages import CommandFinished, FetchResult, Key, TimerFired
from riven_tui.tui.ops import Fetch, Op, StartTimer
from riven_tui.tui.styles.theme import DEFAULT, RivenTheme
from riven_tui.tui.types import Resource, ScreenId, ViewState


class ScreenModel:
    """Shared fetch, timer and view-state behaviour."""

    SCREEN_ID: ScreenId
    SCREEN_TITLE: str = ""
    # Resources requested by init, timer ticks and manual refresh.
    RESOURCES: tuple[Resource, ...] = ()
    # Resources whose failure leaves ``error`` untouched.
    OPTIONAL_RESOURCES: frozenset[Resource] = frozenset()

    def __init__(self, ui: UISettings | None = None, theme: RivenTheme = DEFAULT):
        self.ui = ui or UISettings()
        self.theme = theme
        # Outstanding fetches per resource.
        self.pending: dict[Resource, int] = {}
        self.error: str | None = None
        self.last_update: datetime | None = None
        self.width = 0
        self.height = 0

    # -- protocol ---------------------------------------------------------

    def init(self) -> list[Op]:
        ops = self.fetch_ops()
        timer = self.timer_op()
        if timer is not None:
            ops.append(timer)
        return ops

    def handle(self, msg) -> list[Op]:
        if isinstance(msg, Key):
            return self.on_key(msg.key, msg)
        if isinstance(msg, FetchResult):
            return self.on_fetch_result(msg)
        if isinstance(msg, TimerFired):
            return self.on_timer(msg)
        if isinstance(msg, CommandFinished):
            return self.on_command_finished(msg)
        return self.on_message(msg)

    def set_size(self, width: int, height: int) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)

    @property
    def captures_input(self) -> bool:
        """True while the screen needs every key (text entry, confirmation)."""
        return False

    @property
    def has_content(self) -> bool:
        return False

    @property
    def loading(self) -> bool:
        """True until every requested resource has answered."""
        return any(self.pending.values())

    @property
    def view_state(self) -> ViewState:
        if self.error is not None:
            return ViewState.ERROR
        if self.has_content:
            return ViewState.CONTENT
        return ViewState.LOADING

    def render(self) -> RenderableType:
        view = self.view_state
        if view is ViewState.ERROR:
            return self.render_error()
        if view is ViewState.LOADING:
            return self.render_loading()
        return self.render_content()

    # -- hooks ------------------------------------------------------------

    @property
    def refresh_seconds(self) -> float | None:
        return None

    @property
    def timer_token(self) -> int:
        return 0

    def request(self, resource: Resource, **kwargs) -> Fetch:
        """Fetch op for ``resource``, counted as pending until its result lands."""
        self.pending[resource] = self.pending.get(resource, 0) + 1
        return Fetch(self.SCREEN_ID, resource, **kwargs)

    def fetch_ops(self) -> list[Op]:
        return [self.request(resource) for resource in self.RESOURCES]

    def timer_op(self) -> StartTimer | None:
        seconds = self.refresh_seconds
        if seconds is None:
            return None
        return StartTimer(self.SCREEN_ID, seconds, self.timer_token)

    def on_key(self, key: str, msg: Key) -> list[Op]:
        if key == "r":
            return self.fetch_ops()
        return []

    def on_timer(self, msg: TimerFired) -> list[Op]:
        if msg.token != self.timer_token:
            return []
        return self.init()

    def on_fetch_result(self, msg: FetchResult) -> list[Op]:
        outstanding = self.pending.pop(msg.resource, 0) - 1
        if outstanding > 0:
            self.pending[msg.resource] = outstanding
        if not msg.ok:
            if msg.resource not in self.OPTIONAL_RESOURCES:
                self.error = msg.error
            return []
        self.apply(msg.resource, msg.data)
        if msg.resource not in self.OPTIONAL_RESOURCES:
            self.error = None
        self.last_update = datetime.now()
        return []

    def apply(self, resource: Resource, data) -> None:
        """Store a successfully fetched payload."""

    def on_command_finished(self, msg: CommandFinished) -> list[Op]:
        return []

    def on_message(self, msg) -> list[Op]:
        return []

    # -- rendering --------------------------------------------------------

    def render_loading(self) -> RenderableType:
        return Text(f"Loading {self.SCREEN_TITLE.lower()}...", style=self.theme.muted)

    def render_error(self) -> RenderableType:
        return Group(
            Text(f"Error: {self.error}", style=f"bold {self.theme.error}"),
            Text("Press r to retry", style=self.theme.muted),
        )

    def render_content(self) -> RenderableType:
        return Text("")

    def status_line(self) -> Text:
        parts = []
        if self.loading:
            parts.append("Refreshing...")
        if self.last_update is not None:
            parts.append(f"Last updated {self.last_update:%H:%M:%S}")
        return Text("  ".join(parts), style=self.theme.muted)

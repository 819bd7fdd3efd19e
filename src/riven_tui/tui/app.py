"""Main RivenApp application.

Textual owns the terminal and the message queue. Every Textual event the
core cares about is translated into a core message and handed to
``router.handle``; the resulting ops go to the :class:`Runtime`, whose
results come back through ``post_message``.
"""

from __future__ import annotations

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Static

from riven_tui import APP_NAME
from riven_tui.api.client import RivenClient
from riven_tui.api.events import EventStreamClient
from riven_tui.config.settings import Settings
from riven_tui.tui import router
from riven_tui.tui.keymap import normalize_key
from riven_tui.tui.messages import Key, Resized
from riven_tui.tui.runtime import Runtime
from riven_tui.tui.styles.theme import get_theme_by_name
from riven_tui.utils.logging import get_logger

logger = get_logger(__name__)


class RuntimeMessage(Message):
    """Envelope carrying a core message from a runtime task."""

    def __init__(self, payload) -> None:
        super().__init__()
        self.payload = payload


class RivenApp(App):
    """Riven terminal client."""

    TITLE = APP_NAME
    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        overflow: hidden;
    }

    #frame {
        width: 100%;
        height: 100%;
        padding: 0 1;
    }
    """

    # Keys Textual would otherwise claim for itself.
    BINDINGS = [
        Binding("ctrl+c", "router_key('ctrl+c')", "Quit", show=False, priority=True),
        Binding("tab", "router_key('tab')", show=False, priority=True),
        Binding("shift+tab", "router_key('shift+tab')", show=False, priority=True),
    ]

    def __init__(
        self,
        settings: Settings,
        client: RivenClient | None = None,
        stream_client: EventStreamClient | None = None,
    ):
        super().__init__()
        self.settings = settings
        self.client = client or RivenClient.from_settings(settings)
        self.stream_client = stream_client or EventStreamClient.from_settings(settings)
        self.state, self._initial_ops = router.initialize(
            settings.ui, get_theme_by_name(settings.ui.theme)
        )
        self.runtime: Runtime | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="frame")

    def on_mount(self) -> None:
        self.runtime = Runtime(
            self.client,
            self.stream_client,
            deliver=self._deliver,
            on_quit=self.exit,
        )
        logger.info("tui_started", endpoint=self.settings.api.endpoint)
        self.route(Resized(self.size.width, self.size.height))
        self.runtime.submit(self._initial_ops)
        self._initial_ops = []

    async def on_unmount(self) -> None:
        if self.runtime is not None:
            await self.runtime.shutdown()
        logger.info("tui_stopped")

    def _deliver(self, msg) -> None:
        self.post_message(RuntimeMessage(msg))

    def route(self, msg) -> None:
        """Run one core message through the router and redraw."""
        self.state, ops = router.handle(self.state, msg)
        if self.runtime is not None:
            self.runtime.submit(ops)
        self.query_one("#frame", Static).update(router.render(self.state))

    def on_runtime_message(self, message: RuntimeMessage) -> None:
        self.route(message.payload)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.route(Key(normalize_key(event.key, event.character), event.character))

    def on_resize(self, event: events.Resize) -> None:
        self.route(Resized(event.size.width, event.size.height))

    def action_router_key(self, key: str) -> None:
        self.route(Key(key))

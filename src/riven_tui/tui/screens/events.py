"""Live events screen, the consumer of the server-sent event stream.

Connection status is a state machine::

    disconnected/error --connect--> connecting --opened--> live
    connecting/live --fail--> error      connecting/live --end--> disconnected
    any --pause--> paused --resume--> connecting

Each (re)connect bumps ``generation``; stream messages carrying an older
generation belong to a superseded connection and are ignored.
"""

from __future__ import annotations

from typing import Any

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text
from transitions import Machine

from riven_tui.models import StreamEvent
from riven_tui.tui.messages import (
    StreamEnded,
    StreamEventReceived,
    StreamIdle,
    StreamOpened,
    StreamReconnect,
)
from riven_tui.tui.ops import CloseStream, Delay, ListenStream, Op, OpenStream, PumpStream
from riven_tui.tui.screens.base import ScreenModel
from riven_tui.tui.types import ScreenId, ViewState
from riven_tui.utils.logging import get_logger

logger = get_logger(__name__)

RECONNECT_SECONDS = 5.0
TYPE_WIDTH = 12
MESSAGE_WIDTH = 47
DATA_WIDTH = 27
CHROME_LINES = 8


class StreamStatus:
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    LIVE = "live"
    ERROR = "error"
    PAUSED = "paused"


STATUSES = [
    StreamStatus.DISCONNECTED,
    StreamStatus.CONNECTING,
    StreamStatus.LIVE,
    StreamStatus.ERROR,
    StreamStatus.PAUSED,
]

STATUS_TRANSITIONS: list[dict[str, Any]] = [
    {
        "trigger": "connect",
        "source": [
            StreamStatus.DISCONNECTED,
            StreamStatus.CONNECTING,
            StreamStatus.LIVE,
            StreamStatus.ERROR,
        ],
        "dest": StreamStatus.CONNECTING,
    },
    {"trigger": "opened", "source": StreamStatus.CONNECTING, "dest": StreamStatus.LIVE},
    {
        "trigger": "fail",
        "source": [StreamStatus.CONNECTING, StreamStatus.LIVE],
        "dest": StreamStatus.ERROR,
    },
    {
        "trigger": "end",
        "source": [StreamStatus.CONNECTING, StreamStatus.LIVE],
        "dest": StreamStatus.DISCONNECTED,
    },
    {"trigger": "pause", "source": "*", "dest": StreamStatus.PAUSED},
    {"trigger": "resume", "source": StreamStatus.PAUSED, "dest": StreamStatus.CONNECTING},
]

STATUS_LABELS = {
    StreamStatus.DISCONNECTED: ("● Disconnected", "muted"),
    StreamStatus.CONNECTING: ("◌ Connecting", "warning"),
    StreamStatus.LIVE: ("● Live", "success"),
    StreamStatus.ERROR: ("✗ Error", "error"),
    StreamStatus.PAUSED: ("‖ Paused", "muted"),
}


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[:width] + "..."


class EventsModel(ScreenModel):
    SCREEN_ID = ScreenId.EVENTS
    SCREEN_TITLE = "Events"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.events: list[StreamEvent] = []
        self.generation = 0
        self.cursor = 0
        self._machine = Machine(
            model=self,
            states=STATUSES,
            transitions=STATUS_TRANSITIONS,
            initial=StreamStatus.DISCONNECTED,
            model_attribute="status",
            auto_transitions=False,
            ignore_invalid_triggers=True,
        )

    @property
    def max_events(self) -> int:
        return self.ui.max_events

    @property
    def streaming(self) -> bool:
        return self.status in (StreamStatus.CONNECTING, StreamStatus.LIVE)

    def init(self) -> list[Op]:
        return self._start()

    def _start(self) -> list[Op]:
        ops: list[Op] = []
        if self.generation and self.streaming:
            ops.append(CloseStream(self.generation))
        self.generation += 1
        self.error = None
        if self.status == StreamStatus.PAUSED:
            self.resume()
        else:
            self.connect()
        ops.append(OpenStream(self.generation))
        return ops

    def _pause(self) -> list[Op]:
        ops: list[Op] = [CloseStream(self.generation)] if self.streaming else []
        # Results of the closed connection must not resurrect it.
        self.generation += 1
        self.pause()
        return ops

    def on_key(self, key, msg) -> list[Op]:
        if key == "r":
            return self._start()
        if key == "p":
            if self.status == StreamStatus.PAUSED:
                return self._start()
            return self._pause()
        if key == "c":
            self.events.clear()
            self.cursor = 0
            return []
        if key in ("up", "k"):
            self.cursor = max(self.cursor - 1, 0)
            return []
        if key in ("down", "j"):
            self.cursor = min(self.cursor + 1, max(len(self.events) - 1, 0))
            return []
        return []

    def on_timer(self, msg) -> list[Op]:
        return []

    def on_message(self, msg) -> list[Op]:
        generation = getattr(msg, "generation", None)
        if generation != self.generation:
            if isinstance(msg, StreamOpened):
                return [CloseStream(msg.generation)]
            return []

        if isinstance(msg, StreamOpened):
            self.opened()
            return [PumpStream(generation), ListenStream(generation)]
        if isinstance(msg, StreamEventReceived):
            self._add(msg.event)
            return [ListenStream(generation)] if self.status == StreamStatus.LIVE else []
        if isinstance(msg, StreamIdle):
            return [ListenStream(generation)] if self.status == StreamStatus.LIVE else []
        if isinstance(msg, StreamEnded):
            if msg.error:
                self.error = msg.error
                self.fail()
            else:
                self.end()
            logger.info("stream_reconnect_scheduled", generation=generation, error=msg.error)
            return [Delay(RECONNECT_SECONDS, StreamReconnect(generation))]
        if isinstance(msg, StreamReconnect):
            if self.status in (StreamStatus.ERROR, StreamStatus.DISCONNECTED):
                logger.info("stream_reconnecting", generation=generation)
                return self._start()
        return []

    def _add(self, event: StreamEvent) -> None:
        self.events.insert(0, event)
        del self.events[self.max_events :]
        if self.cursor:
            self.cursor = min(self.cursor + 1, len(self.events) - 1)

    # -- rendering --------------------------------------------------------

    @property
    def has_content(self) -> bool:
        return True

    @property
    def view_state(self) -> ViewState:
        if self.events:
            return ViewState.CONTENT
        if self.status == StreamStatus.ERROR:
            return ViewState.ERROR
        if self.status == StreamStatus.CONNECTING:
            return ViewState.LOADING
        return ViewState.CONTENT

    def _indicator(self) -> Text:
        label, color = STATUS_LABELS[self.status]
        line = Text("Real-time Events ", style=self.theme.header)
        line.append(label, style=f"bold {getattr(self.theme, color)}")
        line.append(f"   Events: {len(self.events)}/{self.max_events}", style=self.theme.muted)
        return line

    def _controls(self) -> Text:
        pause = "resume" if self.status == StreamStatus.PAUSED else "pause"
        return Text(f"[r] restart [p] {pause} [c] clear [↑/↓] navigate", style=self.theme.muted)

    def render_loading(self) -> RenderableType:
        return Group(
            self._indicator(),
            Text("Connecting to event stream...", style=self.theme.muted),
            self._controls(),
        )

    def render_error(self) -> RenderableType:
        return Group(
            self._indicator(),
            Text(f"Error: {self.error}", style=f"bold {self.theme.error}"),
            Text(f"Reconnecting in {RECONNECT_SECONDS:g}s, press r to restart now", style=self.theme.muted),
        )

    def render_content(self) -> RenderableType:
        parts: list[RenderableType] = [self._indicator()]
        if self.error and self.status == StreamStatus.ERROR:
            parts.append(Text(f"Last error: {self.error}", style=self.theme.error))
        parts.append(self._controls())
        if not self.events:
            parts.append(Text("Waiting for events...", style=self.theme.muted))
            return Group(*parts)

        table = Table(expand=True, header_style=self.theme.header)
        table.add_column("Time", no_wrap=True)
        table.add_column("Type", no_wrap=True)
        table.add_column("Message", ratio=2, no_wrap=True)
        table.add_column("Data", ratio=1, no_wrap=True)
        size = max(self.height - CHROME_LINES, 3) if self.height else len(self.events)
        start = max(min(self.cursor - size + 1, len(self.events) - size), 0)
        for index, event in enumerate(self.events[start : start + size], start=start):
            table.add_row(
                event.clock,
                _clip(event.type, TYPE_WIDTH),
                _clip(event.message or "No message", MESSAGE_WIDTH),
                _clip(event.data_summary(), DATA_WIDTH),
                style=self.theme.selected if index == self.cursor else None,
            )
        parts.append(table)
        return Group(*parts)

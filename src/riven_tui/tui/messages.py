"""Messages fed into ``router.handle``.

Every input to the application (keys, resizes, finished requests, timer
expiries, stream activity) arrives as one of these immutable values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from riven_tui.models import ItemAction, StreamEvent
from riven_tui.tui.types import Resource, ScreenId


@dataclass(frozen=True)
class Key:
    key: str
    character: str | None = None

    @property
    def printable(self) -> str | None:
        """The character to insert when typing text, if any."""
        if self.key == "space":
            return " "
        char = self.character
        if char and len(char) == 1 and char.isprintable():
            return char
        return None


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class FetchResult:
    screen: ScreenId
    resource: Resource
    data: Any = None
    error: str | None = None
    visit: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class TimerFired:
    screen: ScreenId
    token: int = 0


@dataclass(frozen=True)
class CommandFinished:
    origin: ScreenId
    action: ItemAction
    ids: tuple[str, ...]
    message: str = ""
    error: str | None = None
    visit: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def screen(self) -> ScreenId:
        return self.origin


@dataclass(frozen=True)
class ShowItemDetail:
    item_id: str


@dataclass(frozen=True)
class ToastExpired:
    pass


@dataclass(frozen=True)
class StreamOpened:
    generation: int
    screen: ScreenId = field(default=ScreenId.EVENTS)


@dataclass(frozen=True)
class StreamEventReceived:
    generation: int
    event: StreamEvent
    screen: ScreenId = field(default=ScreenId.EVENTS)


@dataclass(frozen=True)
class StreamIdle:
    """No event arrived within the poll window; listen again."""

    generation: int
    screen: ScreenId = field(default=ScreenId.EVENTS)


@dataclass(frozen=True)
class StreamEnded:
    generation: int
    error: str | None = None
    screen: ScreenId = field(default=ScreenId.EVENTS)


@dataclass(frozen=True)
class StreamReconnect:
    generation: int
    screen: ScreenId = field(default=ScreenId.EVENTS)


ADDRESSED = (
    FetchResult,
    TimerFired,
    StreamOpened,
    StreamEventReceived,
    StreamIdle,
    StreamEnded,
    StreamReconnect,
)

Message = Union[
    Key,
    Resized,
    FetchResult,
    TimerFired,
    CommandFinished,
    ShowItemDetail,
    ToastExpired,
    StreamOpened,
    StreamEventReceived,
    StreamIdle,
    StreamEnded,
    StreamReconnect,
]

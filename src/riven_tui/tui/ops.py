"""Asynchronous operations returned by ``router.handle``.

Ops are plain descriptions. The runtime executes each one as a task that
produces at most one message; ``Quit``, ``EnterFullScreen`` and
``CloseStream`` produce none.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from riven_tui.models import ItemAction, ItemsQuery
from riven_tui.tui.types import Resource, ScreenId


@dataclass(frozen=True)
class Fetch:
    screen: ScreenId
    resource: Resource
    visit: int = 0
    item_id: str | None = None
    query: ItemsQuery | None = None


@dataclass(frozen=True)
class RunCommand:
    origin: ScreenId
    action: ItemAction
    ids: tuple[str, ...]
    visit: int = 0


@dataclass(frozen=True)
class StartTimer:
    screen: ScreenId
    seconds: float
    token: int = 0


@dataclass(frozen=True)
class Delay:
    """Deliver ``message`` after ``seconds``."""

    seconds: float
    message: Any


@dataclass(frozen=True)
class Emit:
    """Deliver ``message`` on the next loop turn."""

    message: Any


@dataclass(frozen=True)
class OpenStream:
    generation: int


@dataclass(frozen=True)
class PumpStream:
    generation: int


@dataclass(frozen=True)
class ListenStream:
    generation: int


@dataclass(frozen=True)
class CloseStream:
    generation: int


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class EnterFullScreen:
    pass


Op = Union[
    Fetch,
    RunCommand,
    StartTimer,
    Delay,
    Emit,
    OpenStream,
    PumpStream,
    ListenStream,
    CloseStream,
    Quit,
    EnterFullScreen,
]

"""Message router: the single authority for what is on screen.

``handle`` is called once per message, in arrival order, and never awaits.
It updates :class:`AppState` in place and returns the ops the runtime should
start. ``render`` turns the state into one rich renderable.
"""

from __future__ import annotations

import time

from rich.console import Group, RenderableType
from rich.rule import Rule
from rich.text import Text

from riven_tui.config.settings import UISettings
from riven_tui.tui.keymap import HELP_KEY, QUIT_KEYS, SCREEN_KEYS
from riven_tui.tui.messages import (
    ADDRESSED,
    CommandFinished,
    FetchResult,
    Key,
    Resized,
    ShowItemDetail,
    TimerFired,
    ToastExpired,
)
from riven_tui.tui.ops import Delay, EnterFullScreen, Op, Quit
from riven_tui.tui.screens import ItemDetailModel, ScreenModel
from riven_tui.tui.state import AppState, Toast
from riven_tui.tui.styles.theme import DEFAULT, RivenTheme
from riven_tui.tui.types import ScreenId
from riven_tui.utils.logging import get_logger

logger = get_logger(__name__)

# Navigation bar and toast line around the screen body.
NAV_LINES = 2
TOAST_LINES = 1

NAV_ITEMS = (
    (ScreenId.DASHBOARD, "Dashboard", "d"),
    (ScreenId.ITEMS, "Items", "m"),
    (ScreenId.SETTINGS, "Settings", "s"),
    (ScreenId.LOGS, "Logs", "l"),
    (ScreenId.EVENTS, "Events", "e"),
    (ScreenId.HELP, "Help", "?"),
)


def initialize(
    ui: UISettings | None = None, theme: RivenTheme = DEFAULT
) -> tuple[AppState, list[Op]]:
    """Fresh state with the dashboard active."""
    state = AppState.create(ui, theme)
    state.activated.add(ScreenId.DASHBOARD)
    ops = state.screens[ScreenId.DASHBOARD].init()
    ops.append(EnterFullScreen())
    return state, ops


def handle(state: AppState, msg, now: float | None = None) -> tuple[AppState, list[Op]]:
    """Apply one message.

    Args:
        state: Current state, updated in place.
        msg: Any message from :mod:`riven_tui.tui.messages`.
        now: Monotonic clock reading used to expire toasts.
    """
    now = time.monotonic() if now is None else now
    state.toasts = [toast for toast in state.toasts if not toast.expired(now)]

    if isinstance(msg, Resized):
        _resize(state, msg.width, msg.height)
        return state, []

    if isinstance(msg, Key) and not state.active_screen.captures_input:
        if msg.key in QUIT_KEYS:
            state.quitting = True
            return state, [Quit()]
        if msg.key == HELP_KEY:
            if state.active is ScreenId.HELP:
                return state, _switch(state, _back_target(state))
            return state, _switch(state, ScreenId.HELP)
        if msg.key in SCREEN_KEYS:
            return state, _switch(state, SCREEN_KEYS[msg.key])

    if isinstance(msg, ShowItemDetail):
        return state, _open_detail(state, msg.item_id)

    if (
        isinstance(msg, Key)
        and msg.key == "escape"
        and state.active is ScreenId.ITEM_DETAIL
        and not state.active_screen.captures_input
    ):
        state.item_detail = None
        state.active = ScreenId.ITEMS
        return state, []

    if isinstance(msg, CommandFinished):
        return state, _command_finished(state, msg, now)

    if isinstance(msg, ADDRESSED):
        target = _addressed_screen(state, msg)
        if target is None:
            return state, []
        return state, target.handle(msg)

    if isinstance(msg, Key):
        return state, state.active_screen.handle(msg)

    # ToastExpired and anything unknown only trigger a redraw.
    return state, []


def _resize(state: AppState, width: int, height: int) -> None:
    state.width = max(width, 0)
    state.height = max(height, 0)
    body = max(state.height - NAV_LINES - TOAST_LINES, 0)
    for screen in state.screens.values():
        screen.set_size(state.width, body)
    if state.item_detail is not None:
        state.item_detail.set_size(state.width, body)


def _back_target(state: AppState) -> ScreenId:
    if state.previous is ScreenId.ITEM_DETAIL and state.item_detail is None:
        return ScreenId.ITEMS
    if state.previous is ScreenId.HELP:
        return ScreenId.DASHBOARD
    return state.previous


def _switch(state: AppState, target: ScreenId) -> list[Op]:
    if target is state.active:
        return []
    # Help keeps the detail so it can toggle back; anything else discards it.
    if target not in (ScreenId.HELP, ScreenId.ITEM_DETAIL):
        state.item_detail = None
    state.previous = state.active
    state.active = target
    if target is ScreenId.ITEM_DETAIL or target in state.activated:
        return []
    state.activated.add(target)
    return state.screens[target].init()


def _open_detail(state: AppState, item_id: str) -> list[Op]:
    state.visits += 1
    detail = ItemDetailModel(item_id, state.visits, state.ui, state.theme)
    detail.set_size(state.width, max(state.height - NAV_LINES - TOAST_LINES, 0))
    state.item_detail = detail
    if state.active is not ScreenId.ITEM_DETAIL:
        state.previous = state.active
    state.active = ScreenId.ITEM_DETAIL
    return detail.init()


def _visit_of(msg) -> int | None:
    if isinstance(msg, FetchResult):
        return msg.visit
    if isinstance(msg, TimerFired):
        return msg.token
    if isinstance(msg, CommandFinished):
        return msg.visit
    return None


def _addressed_screen(state: AppState, msg) -> ScreenModel | None:
    if msg.screen is ScreenId.ITEM_DETAIL:
        detail = state.item_detail
        if detail is None or _visit_of(msg) != detail.visit:
            return None
        return detail
    return state.screens.get(msg.screen)


def _command_finished(state: AppState, msg: CommandFinished, now: float) -> list[Op]:
    count = len(msg.ids)
    noun = "item" if count == 1 else "items"
    if msg.ok:
        text = msg.message or f"{msg.action.label} succeeded for {count} {noun}"
        level = "success"
        logger.info("command_succeeded", action=msg.action.value, ids=list(msg.ids))
    else:
        text = f"{msg.action.label} failed: {msg.error}"
        level = "error"
        logger.warning("command_failed", action=msg.action.value, ids=list(msg.ids), error=msg.error)
    ttl = state.ui.toast_seconds
    state.toasts.append(Toast(text=text, level=level, created_at=now, ttl=ttl))
    ops: list[Op] = [Delay(ttl, ToastExpired())]
    origin = _addressed_screen(state, msg)
    if origin is not None:
        ops.extend(origin.handle(msg))
    return ops


def render(state: AppState) -> RenderableType:
    """Full frame for the current state. Never mutates ``state``."""
    if state.width <= 0 or state.height <= 0:
        return Text("Loading...")
    parts: list[RenderableType] = [_nav_bar(state), Rule(style=state.theme.muted)]
    parts.append(state.active_screen.render())
    if state.toasts:
        parts.append(_toast_line(state))
    return Group(*parts)


def _nav_bar(state: AppState) -> Text:
    theme = state.theme
    active = ScreenId.ITEMS if state.active is ScreenId.ITEM_DETAIL else state.active
    bar = Text("Riven ", style=f"bold {theme.primary}")
    for screen_id, label, key in NAV_ITEMS:
        style = f"bold reverse {theme.primary}" if screen_id is active else theme.muted
        bar.append(f" {label} [{key}] ", style=style)
    return bar


def _toast_line(state: AppState) -> Text:
    theme = state.theme
    line = Text()
    for index, toast in enumerate(state.toasts):
        if index:
            line.append("  ")
        color = theme.success if toast.level == "success" else theme.error
        line.append(("✓ " if toast.level == "success" else "✗ ") + toast.text, style=f"bold {color}")
    return line

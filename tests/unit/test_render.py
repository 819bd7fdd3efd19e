"""
Rendering Tests

Every reachable state must render to a frame without raising, whatever
combination of payloads, errors and sizes the screens hold.
"""

from __future__ import annotations

import pytest

from riven_tui.models import ItemAction, LogsResponse, MediaItem, RDUser, StatsResponse, StreamEvent
from riven_tui.tui import router
from riven_tui.tui.messages import (
    CommandFinished,
    FetchResult,
    Key,
    Resized,
    ShowItemDetail,
    StreamEventReceived,
    StreamOpened,
)
from riven_tui.tui.styles.theme import LIGHT
from riven_tui.tui.types import Resource, ScreenId

SCREEN_KEYS = ["d", "m", "s", "l", "e", "?"]

PAYLOADS = {
    (ScreenId.DASHBOARD, Resource.STATS): StatsResponse(),
    (ScreenId.DASHBOARD, Resource.SERVICES): {},
    (ScreenId.DASHBOARD, Resource.RD_USER): RDUser(),
    (ScreenId.SETTINGS, Resource.SETTINGS): {},
    (ScreenId.LOGS, Resource.LOGS): LogsResponse(),
}


def frame(state, render, width=100):
    output = render(router.render(state), width=width)
    assert output.strip()
    return output


@pytest.mark.tui
class TestFrames:
    """Tests for router.render across screens and states."""

    @pytest.mark.parametrize("screen_key", SCREEN_KEYS)
    @pytest.mark.parametrize("size", [(120, 40), (40, 10), (20, 4)])
    def test_loading_screens(self, render, screen_key, size):
        state, _ = router.initialize()
        router.handle(state, Resized(*size))
        router.handle(state, Key(screen_key, screen_key))
        frame(state, render, width=size[0])

    @pytest.mark.parametrize("screen_key", SCREEN_KEYS)
    def test_error_screens(self, render, screen_key):
        state, _ = router.initialize()
        router.handle(state, Resized(100, 30))
        router.handle(state, Key(screen_key, screen_key))
        screen = state.active_screen
        for resource in screen.RESOURCES:
            router.handle(state, FetchResult(screen.SCREEN_ID, resource, error="API error (status 500)"))
        frame(state, render)

    def test_empty_payloads(self, render, items_factory):
        state, _ = router.initialize()
        router.handle(state, Resized(100, 30))
        for (screen_id, resource), data in PAYLOADS.items():
            router.handle(state, FetchResult(screen_id, resource, data=data))
        router.handle(state, FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_factory(count=0, total_pages=0)))
        for screen_key in SCREEN_KEYS:
            router.handle(state, Key(screen_key, screen_key))
            frame(state, render)

    def test_item_detail_tabs(self, render):
        state, _ = router.initialize(theme=LIGHT)
        router.handle(state, Resized(100, 30))
        router.handle(state, ShowItemDetail("1"))
        frame(state, render)
        router.handle(state, FetchResult(ScreenId.ITEM_DETAIL, Resource.ITEM, data=MediaItem(id="1"), visit=1))
        for tab in ("1", "2", "3"):
            router.handle(state, Key(tab, tab))
            frame(state, render)

    def test_events_and_toasts(self, render):
        state, _ = router.initialize()
        router.handle(state, Resized(60, 20))
        router.handle(state, Key("e", "e"))
        router.handle(state, StreamOpened(1))
        router.handle(state, StreamEventReceived(1, StreamEvent(type="x" * 40, message="y" * 200, data={"k": "v" * 50})))
        router.handle(state, CommandFinished(ScreenId.ITEMS, ItemAction.RETRY, ("1",), error="boom"), now=0.0)
        output = frame(state, render, width=60)
        assert "Retry failed: boom" in output

    def test_render_does_not_mutate(self, render, items_response):
        state, _ = router.initialize()
        router.handle(state, Resized(100, 30))
        router.handle(state, Key("m", "m"))
        router.handle(state, FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_response))
        before = (state.active, state.screens[ScreenId.ITEMS].cursor, list(state.toasts))
        frame(state, render)
        frame(state, render)
        assert (state.active, state.screens[ScreenId.ITEMS].cursor, list(state.toasts)) == before

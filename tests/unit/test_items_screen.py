"""
Unit Tests for the Media Items Screen

Tests for:
- Search mode (typing, submit, cancel, length cap)
- Paging bounds and direct page jumps
- Filter, sort and media type cycling
- Selection and bulk commands with confirmation
"""

from __future__ import annotations

import pytest

from riven_tui.config.settings import UISettings
from riven_tui.models import ItemAction, ItemState, ItemSummary, MediaType, SortOrder, StatesResponse
from riven_tui.tui.messages import CommandFinished, FetchResult, Key, ShowItemDetail
from riven_tui.tui.ops import Emit, Fetch, RunCommand, StartTimer
from riven_tui.tui.screens.items import SEARCH_MAX_LENGTH, ItemsMode, ItemsModel
from riven_tui.tui.types import Resource, ScreenId, ViewState


def key(model, name, character=None):
    if character is None and len(name) == 1:
        character = name
    return model.handle(Key(name, character))


def type_text(model, text):
    for char in text:
        key(model, "space" if char == " " else char, char)


def loaded(response, **ui) -> ItemsModel:
    model = ItemsModel(UISettings(**ui))
    model.init()
    model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=response))
    model.handle(FetchResult(ScreenId.ITEMS, Resource.STATES, data=StatesResponse(states=["Completed"])))
    return model


def fetch_queries(ops):
    return [op.query for op in ops if isinstance(op, Fetch) and op.resource is Resource.ITEMS]


# =============================================================================
# LIFECYCLE
# =============================================================================


@pytest.mark.tui
class TestLifecycle:
    """Tests for init, fetch results and view state."""

    def test_init_fetches_items_and_states(self):
        model = ItemsModel(UISettings(page_size=25))
        ops = model.init()
        assert ops[0] == Fetch(ScreenId.ITEMS, Resource.ITEMS, query=model.query)
        assert ops[0].query.limit == 25
        assert ops[1] == Fetch(ScreenId.ITEMS, Resource.STATES)
        assert ops[2] == StartTimer(ScreenId.ITEMS, 30.0, 0)
        assert model.view_state is ViewState.LOADING

    def test_failure_keeps_previous_page(self, items_response):
        model = loaded(items_response)
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, error="API error (status 500): boom"))
        assert model.view_state is ViewState.ERROR
        assert model.response is items_response
        assert not model.loading

    def test_states_failure_is_optional(self, items_response):
        model = loaded(items_response)
        model.handle(FetchResult(ScreenId.ITEMS, Resource.STATES, error="nope"))
        assert model.error is None
        assert model.view_state is ViewState.CONTENT

    def test_success_clears_error(self, items_response):
        model = loaded(items_response)
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, error="down"))
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_response))
        assert model.error is None
        assert model.last_update is not None

    def test_refresh_while_showing_content(self, items_response, render):
        model = loaded(items_response)
        ops = key(model, "r")
        assert len(fetch_queries(ops)) == 1
        assert model.view_state is ViewState.CONTENT
        assert "Refreshing..." in render(model.render())

    def test_loading_until_every_fetch_lands(self, items_response):
        model = ItemsModel()
        model.init()
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_response))
        assert model.loading
        model.handle(FetchResult(ScreenId.ITEMS, Resource.STATES, error="nope"))
        assert not model.loading

    def test_overlapping_refreshes_counted(self, items_response):
        model = loaded(items_response)
        key(model, "r")
        key(model, "r")
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_response))
        model.handle(FetchResult(ScreenId.ITEMS, Resource.STATES, data=StatesResponse()))
        assert model.loading
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_response))
        model.handle(FetchResult(ScreenId.ITEMS, Resource.STATES, data=StatesResponse()))
        assert not model.loading


# =============================================================================
# SEARCH
# =============================================================================


@pytest.mark.tui
class TestSearch:
    """Tests for the searching mode."""

    def test_type_and_submit(self, items_response):
        model = loaded(items_response)
        assert key(model, "/") == []
        assert model.mode == ItemsMode.SEARCHING
        assert model.captures_input

        type_text(model, "the matrix ")
        ops = key(model, "enter")

        assert model.mode == ItemsMode.BROWSING
        assert fetch_queries(ops) == [model.query]
        assert model.query.search == "the matrix"
        assert model.query.page == 1

    def test_matrix_scenario(self, items_response):
        model = loaded(items_response)
        key(model, "/")
        type_text(model, "matrix")
        ops = key(model, "enter")
        params = fetch_queries(ops)[0].to_params()
        assert params["search"] == "matrix"
        assert params["page"] == "1"
        assert model.mode == ItemsMode.BROWSING

    def test_ctrl_f_opens_search(self, items_response):
        model = loaded(items_response)
        key(model, "ctrl+f")
        assert model.mode == ItemsMode.SEARCHING

    def test_escape_discards_draft(self, items_response):
        model = loaded(items_response)
        key(model, "/")
        type_text(model, "abc")
        assert key(model, "escape") == []
        assert model.mode == ItemsMode.BROWSING
        assert model.draft == ""
        assert model.query.search == ""

    def test_backspace_and_ignored_keys(self, items_response):
        model = loaded(items_response)
        key(model, "/")
        type_text(model, "abc")
        key(model, "backspace")
        key(model, "down")
        key(model, "f1")
        assert model.draft == "ab"

    def test_length_cap(self, items_response):
        model = loaded(items_response)
        key(model, "/")
        type_text(model, "x" * (SEARCH_MAX_LENGTH + 20))
        assert len(model.draft) == SEARCH_MAX_LENGTH

    def test_draft_starts_from_query(self, items_response):
        model = loaded(items_response)
        key(model, "/")
        type_text(model, "dune")
        key(model, "enter")
        key(model, "/")
        assert model.draft == "dune"

    def test_search_resets_page(self, items_factory):
        model = loaded(items_factory(page=1, total_pages=5))
        key(model, "3")
        key(model, "/")
        type_text(model, "q")
        ops = key(model, "enter")
        assert fetch_queries(ops)[0].page == 1

    def test_placeholder_rendered(self, items_response, render):
        model = loaded(items_response)
        key(model, "/")
        assert "Search media items..." in render(model.render())


# =============================================================================
# PAGING
# =============================================================================


@pytest.mark.tui
class TestPaging:
    """Tests for next/previous and direct page jumps."""

    @pytest.mark.parametrize("name", ["n", "right"])
    def test_next_page(self, items_factory, name):
        model = loaded(items_factory(total_pages=3))
        ops = key(model, name)
        assert [query.page for query in fetch_queries(ops)] == [2]
        assert model.query.page == 2

    def test_next_on_last_page_is_noop(self, items_factory):
        model = loaded(items_factory(page=1, total_pages=1))
        before = model.query
        assert key(model, "n") == []
        assert model.query is before

    @pytest.mark.parametrize("name", ["p", "left"])
    def test_previous_on_first_page_is_noop(self, items_response, name):
        model = loaded(items_response)
        assert key(model, name) == []
        assert model.query.page == 1

    def test_previous_page(self, items_factory):
        model = loaded(items_factory(total_pages=3))
        key(model, "n")
        model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_factory(page=2, total_pages=3)))
        ops = key(model, "p")
        assert fetch_queries(ops)[0].page == 1

    def test_jump_within_bounds(self, items_factory):
        model = loaded(items_factory(total_pages=4))
        ops = key(model, "4")
        assert fetch_queries(ops)[0].page == 4

    def test_jump_past_total_pages_is_noop(self, items_factory):
        model = loaded(items_factory(total_pages=4))
        assert key(model, "5") == []
        assert model.query.page == 1

    def test_paging_resets_cursor(self, items_factory):
        model = loaded(items_factory(total_pages=3))
        key(model, "down")
        key(model, "n")
        assert model.cursor == 0

    def test_shrunk_library_clamps_page_and_refetches(self, items_factory):
        model = loaded(items_factory(total_pages=3))
        key(model, "3")
        ops = model.handle(
            FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_factory(count=0, page=3, total_pages=2))
        )
        assert model.query.page == 2
        assert [query.page for query in fetch_queries(ops)] == [2]

    def test_emptied_library_returns_to_first_page(self, items_factory):
        model = loaded(items_factory(total_pages=3))
        key(model, "2")
        ops = model.handle(
            FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_factory(count=0, page=2, total_pages=0))
        )
        assert model.query.page == 1
        assert [query.page for query in fetch_queries(ops)] == [1]

    def test_page_within_range_needs_no_refetch(self, items_factory):
        model = loaded(items_factory(total_pages=3))
        key(model, "2")
        ops = model.handle(FetchResult(ScreenId.ITEMS, Resource.ITEMS, data=items_factory(page=2, total_pages=3)))
        assert ops == []
        assert model.query.page == 2

    def test_status_shows_page(self, items_factory, render):
        model = loaded(items_factory(count=3, total_pages=3))
        output = render(model.render())
        assert "Page 1/3" in output
        assert "9 items" in output


# =============================================================================
# FILTERS
# =============================================================================


@pytest.mark.tui
class TestFilters:
    """Tests for filter, sort, type and clear."""

    def test_filter_cycle(self, items_response):
        model = loaded(items_response)
        seen = []
        for _ in range(4):
            ops = key(model, "f")
            assert len(fetch_queries(ops)) == 1
            seen.append(model.query.state)
        assert seen == [ItemState.FAILED, ItemState.COMPLETED, ItemState.DOWNLOADED, None]

    def test_sort_cycle_returns_after_four(self, items_response):
        model = loaded(items_response)
        orders = []
        for _ in range(4):
            key(model, "o")
            orders.append(model.query.sort)
        assert orders == [
            SortOrder.DATE_ASC,
            SortOrder.TITLE_ASC,
            SortOrder.TITLE_DESC,
            SortOrder.DATE_DESC,
        ]

    def test_media_type_cycle(self, items_response):
        model = loaded(items_response)
        types = []
        for _ in range(5):
            key(model, "t")
            types.append(model.query.media_type)
        assert types == [MediaType.MOVIE, MediaType.SHOW, MediaType.SEASON, MediaType.EPISODE, None]

    def test_filter_change_resets_page(self, items_factory):
        model = loaded(items_factory(total_pages=3))
        key(model, "2")
        ops = key(model, "f")
        assert fetch_queries(ops)[0].page == 1

    def test_clear_resets_everything_but_limit(self, items_response):
        model = loaded(items_response, page_size=20)
        key(model, "f")
        key(model, "o")
        key(model, "t")
        key(model, "space")
        ops = key(model, "c")
        query = fetch_queries(ops)[0]
        assert query.state is None
        assert query.media_type is None
        assert query.sort is SortOrder.DATE_DESC
        assert query.limit == 20
        assert model.selected == {}

    def test_status_shows_filters(self, items_response, render):
        model = loaded(items_response)
        key(model, "f")
        key(model, "t")
        output = render(model.render())
        assert "Filter: Failed" in output
        assert "Type: movie" in output


# =============================================================================
# SELECTION AND COMMANDS
# =============================================================================


@pytest.mark.tui
class TestCommands:
    """Tests for selection, the actions menu and remove confirmation."""

    def test_cursor_bounds(self, items_factory):
        model = loaded(items_factory(count=2))
        key(model, "up")
        assert model.cursor == 0
        key(model, "j")
        key(model, "j")
        assert model.cursor == 1

    def test_enter_emits_show_detail(self, items_response):
        model = loaded(items_response)
        key(model, "down")
        assert key(model, "enter") == [Emit(ShowItemDetail("101"))]

    def test_enter_on_row_without_id_is_noop(self, items_factory, item_factory):
        listing = items_factory(count=0)
        listing.items.append(ItemSummary.model_validate(item_factory(None)))
        model = loaded(listing)
        assert model.current_row.id == ""
        assert key(model, "enter") == []

    def test_action_on_cursor_row(self, items_response):
        model = loaded(items_response)
        key(model, "a")
        assert model.mode == ItemsMode.ACTIONS
        ops = key(model, "r")
        assert ops == [RunCommand(ScreenId.ITEMS, ItemAction.RETRY, ("100",))]
        assert model.mode == ItemsMode.BROWSING

    @pytest.mark.parametrize(
        ("name", "action"),
        [("x", ItemAction.RESET), ("p", ItemAction.PAUSE), ("u", ItemAction.UNPAUSE)],
    )
    def test_action_keys(self, items_response, name, action):
        model = loaded(items_response)
        key(model, "a")
        assert key(model, name) == [RunCommand(ScreenId.ITEMS, action, ("100",))]

    def test_action_on_selection(self, items_response):
        model = loaded(items_response)
        key(model, "space")
        key(model, "down")
        key(model, "down")
        key(model, "space")
        key(model, "a")
        ops = key(model, "p")
        assert ops == [RunCommand(ScreenId.ITEMS, ItemAction.PAUSE, ("100", "102"))]

    def test_space_toggles(self, items_response):
        model = loaded(items_response)
        key(model, "space")
        key(model, "space")
        assert model.selected == {}

    def test_no_targets_is_noop(self, items_factory):
        model = loaded(items_factory(count=0, total_pages=0))
        key(model, "a")
        assert key(model, "r") == []
        assert key(model, "d") == []
        assert model.mode == ItemsMode.ACTIONS

    def test_escape_closes_actions(self, items_response):
        model = loaded(items_response)
        key(model, "a")
        key(model, "escape")
        assert model.mode == ItemsMode.BROWSING

    def test_remove_requires_confirmation(self, items_response, render):
        model = loaded(items_response)
        key(model, "a")
        assert key(model, "d") == []
        assert model.mode == ItemsMode.CONFIRM_REMOVE
        assert "Remove 1 item? [y/n]" in render(model.render())

        ops = key(model, "y")
        assert ops == [RunCommand(ScreenId.ITEMS, ItemAction.REMOVE, ("100",))]
        assert model.mode == ItemsMode.BROWSING

    @pytest.mark.parametrize("name", ["n", "escape"])
    def test_remove_declined(self, items_response, name):
        model = loaded(items_response)
        key(model, "a")
        key(model, "d")
        assert key(model, name) == []
        assert model.mode == ItemsMode.BROWSING

    def test_finished_command_refetches_and_drops_selection(self, items_response):
        model = loaded(items_response)
        key(model, "space")
        msg = CommandFinished(ScreenId.ITEMS, ItemAction.RETRY, ("100",))
        ops = model.handle(msg)
        assert len(fetch_queries(ops)) == 1
        assert model.selected == {}

    def test_failed_command_keeps_selection(self, items_response):
        model = loaded(items_response)
        key(model, "space")
        ops = model.handle(CommandFinished(ScreenId.ITEMS, ItemAction.RETRY, ("100",), error="boom"))
        assert ops == []
        assert "100" in model.selected


# =============================================================================
# RENDERING
# =============================================================================


@pytest.mark.tui
class TestRendering:
    """Tests for the table view."""

    def test_rows_rendered(self, items_response, render):
        model = loaded(items_response)
        output = render(model.render())
        assert "Item 100" in output
        assert "Completed" in output
        assert "2024-05-01" in output

    def test_empty_page(self, items_factory, render):
        model = loaded(items_factory(count=0, total_pages=0))
        assert "No items found" in render(model.render())

    def test_cursor_window_follows(self, items_factory, render):
        model = loaded(items_factory(count=40, total_pages=1))
        model.set_size(120, 15)
        for _ in range(39):
            key(model, "down")
        output = render(model.render())
        assert "Item 139" in output
        assert "Item 100 " not in output

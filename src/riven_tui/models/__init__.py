"""Typed payloads exchanged with the Riven service."""

from riven_tui.models.common import (
    ActionResponse,
    ItemAction,
    ItemState,
    MediaType,
    MessageResponse,
    SortOrder,
)
from riven_tui.models.events import StreamEvent
from riven_tui.models.items import (
    DEFAULT_PAGE_SIZE,
    ItemsQuery,
    ItemsResponse,
    ItemSummary,
    MediaItem,
    Stream,
    parse_streams,
)
from riven_tui.models.stats import (
    LogsResponse,
    RDUser,
    ServicesResponse,
    StatesResponse,
    StatsResponse,
)

__all__ = [
    "ActionResponse",
    "DEFAULT_PAGE_SIZE",
    "ItemAction",
    "ItemState",
    "ItemsQuery",
    "ItemsResponse",
    "ItemSummary",
    "LogsResponse",
    "MediaItem",
    "MediaType",
    "MessageResponse",
    "RDUser",
    "ServicesResponse",
    "SortOrder",
    "StatesResponse",
    "StatsResponse",
    "Stream",
    "StreamEvent",
    "parse_streams",
]

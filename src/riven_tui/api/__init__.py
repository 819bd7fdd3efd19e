"""HTTP gateway and event stream client for the Riven service."""

from riven_tui.api.client import API_PREFIX, RivenClient
from riven_tui.api.errors import (
    ApiError,
    DecodeError,
    RivenError,
    StreamError,
    TransportError,
)
from riven_tui.api.events import (
    EVENT_CHANNEL_CAPACITY,
    EventStreamClient,
    EventStreamConnection,
    iter_events,
    new_channel,
    parse_event_line,
)

__all__ = [
    "API_PREFIX",
    "ApiError",
    "DecodeError",
    "EVENT_CHANNEL_CAPACITY",
    "EventStreamClient",
    "EventStreamConnection",
    "RivenClient",
    "RivenError",
    "StreamError",
    "TransportError",
    "iter_events",
    "new_channel",
    "parse_event_line",
]

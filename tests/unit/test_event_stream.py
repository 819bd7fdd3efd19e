"""
Unit Tests for Event Stream Ingestion

Tests for:
- Line parsing (only well-formed ``data:`` lines become events)
- Connecting (headers, status handling)
- Pumping into a bounded channel (order, backpressure, cancellation)
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from riven_tui.api.errors import StreamError
from riven_tui.api.events import (
    EVENT_CHANNEL_CAPACITY,
    EventStreamClient,
    iter_events,
    new_channel,
    parse_event_line,
)


def data_line(**payload) -> str:
    return "data: " + json.dumps(payload)


def stream_body(count: int) -> bytes:
    lines = [": keepalive"]
    for index in range(count):
        lines.append(data_line(type="item_update", message=f"event {index}", data={"n": index}))
        lines.append("")
    return ("\n".join(lines) + "\n").encode()


def make_client(handler) -> EventStreamClient:
    return EventStreamClient("http://riven.test/", "secret-token", transport=httpx.MockTransport(handler))


# =============================================================================
# PARSING
# =============================================================================


@pytest.mark.unit
class TestParseEventLine:
    """Tests for parse_event_line and iter_events."""

    def test_data_line_decodes(self):
        event = parse_event_line(data_line(type="log", timestamp="2024-05-01T08:09:10Z", message="hi"))
        assert event is not None
        assert event.type == "log"
        assert event.message == "hi"
        assert event.clock == "08:09:10"

    def test_trailing_newline_ignored(self):
        assert parse_event_line(data_line(type="log") + "\r\n").type == "log"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            ": keepalive",
            "event: update",
            "id: 12",
            'data:{"type": "nospace"}',
            "data: not json",
            "data: [1, 2, 3]",
            'data: {"type": "cut',
        ],
    )
    def test_non_event_lines_skipped(self, line):
        assert parse_event_line(line) is None

    def test_keepalive_and_bad_json(self):
        lines = ['data: {"type":"x","timestamp":"t","data":{}}', ": keep-alive"]
        events = list(iter_events(lines))
        assert len(events) == 1
        assert events[0].type == "x"
        assert events[0].clock == "t"

        assert list(iter_events(["data: not-json"])) == []
        after = list(iter_events(["data: not-json", 'data: {"type":"y"}']))
        assert [event.type for event in after] == ["y"]

    def test_iter_events_keeps_order(self):
        lines = [
            data_line(type="a"),
            "garbage",
            data_line(type="b"),
            "data: {broken",
            data_line(type="c"),
        ]
        assert [event.type for event in iter_events(lines)] == ["a", "b", "c"]

    def test_null_fields(self):
        event = parse_event_line('data: {"type": "x", "data": null, "message": null}')
        assert event.data == {}
        assert event.message == ""

    def test_channel_capacity(self):
        assert new_channel().maxsize == EVENT_CHANNEL_CAPACITY == 50


# =============================================================================
# CONNECTING
# =============================================================================


@pytest.mark.unit
class TestConnect:
    """Tests for EventStreamClient.connect."""

    @pytest.mark.asyncio
    async def test_request_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"")

        client = make_client(handler)
        connection = await client.connect()
        await connection.aclose()
        await client.close()

        request = seen[0]
        assert request.url.path == "/api/v1/events/stream"
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["Accept"] == "text/event-stream"
        assert request.headers["Cache-Control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        client = make_client(lambda request: httpx.Response(401, text="unauthorized"))
        with pytest.raises(StreamError) as excinfo:
            await client.connect()
        await client.close()
        assert excinfo.value.status_code == 401
        assert "401" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)
        with pytest.raises(StreamError) as excinfo:
            await client.connect()
        await client.close()
        assert excinfo.value.status_code is None

    @pytest.mark.asyncio
    async def test_cancelled_before_connect(self):
        calls = []
        client = make_client(lambda request: calls.append(request) or httpx.Response(200))
        cancel = asyncio.Event()
        cancel.set()
        with pytest.raises(StreamError):
            await client.connect(cancel)
        await client.close()
        assert calls == []


# =============================================================================
# PUMPING
# =============================================================================


@pytest.mark.unit
class TestPump:
    """Tests for EventStreamConnection.pump."""

    @pytest.mark.asyncio
    async def test_delivers_in_order(self):
        client = make_client(lambda request: httpx.Response(200, content=stream_body(4)))
        channel = new_channel()
        delivered = await client.run(channel)
        await client.close()

        assert delivered == 4
        received = [channel.get_nowait().message for _ in range(channel.qsize())]
        assert received == ["event 0", "event 1", "event 2", "event 3"]

    @pytest.mark.asyncio
    async def test_backpressure_blocks_without_dropping(self):
        client = make_client(lambda request: httpx.Response(200, content=stream_body(7)))
        connection = await client.connect()
        channel: asyncio.Queue = asyncio.Queue(maxsize=3)

        pump = asyncio.create_task(connection.pump(channel))
        await asyncio.sleep(0.05)

        # The reader is parked on put() with a full channel.
        assert not pump.done()
        assert channel.qsize() == 3
        assert connection.delivered == 3

        received = []
        for _ in range(7):
            event = await asyncio.wait_for(channel.get(), timeout=1)
            received.append(event.data["n"])
        assert await asyncio.wait_for(pump, timeout=1) == 7
        assert received == list(range(7))
        assert connection.closed
        await client.close()

    @pytest.mark.asyncio
    async def test_cancel_stops_pump(self):
        async def endless():
            yield (data_line(type="first") + "\n").encode()
            await asyncio.sleep(30)
            yield (data_line(type="never") + "\n").encode()

        client = make_client(lambda request: httpx.Response(200, content=endless()))
        connection = await client.connect()
        channel = new_channel()
        cancel = asyncio.Event()

        pump = asyncio.create_task(connection.pump(channel, cancel))
        first = await asyncio.wait_for(channel.get(), timeout=1)
        cancel.set()
        delivered = await asyncio.wait_for(pump, timeout=1)
        await client.close()

        assert first.type == "first"
        assert delivered == 1
        assert connection.closed
        assert channel.empty()

    @pytest.mark.asyncio
    async def test_read_failure_raises_stream_error(self):
        async def broken():
            yield (data_line(type="ok") + "\n").encode()
            raise httpx.ReadError("connection reset")

        client = make_client(lambda request: httpx.Response(200, content=broken()))
        connection = await client.connect()
        channel = new_channel()
        with pytest.raises(StreamError):
            await connection.pump(channel)
        await client.close()

        assert channel.qsize() == 1
        assert connection.closed

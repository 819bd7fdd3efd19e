"""Server-sent event stream ingestion.

The stream is read line by line. Only lines starting with ``data: `` carry an
event; each is decoded as one JSON object. Decoded events are handed to a
bounded :class:`asyncio.Queue`: when the consumer falls behind, the reader
blocks on ``put`` instead of buffering or dropping.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Iterator

import httpx
from pydantic import ValidationError

from riven_tui.api.client import API_PREFIX, auth_headers
from riven_tui.api.errors import StreamError
from riven_tui.models import StreamEvent
from riven_tui.utils.logging import get_logger

logger = get_logger(__name__)

EVENT_CHANNEL_CAPACITY = 50
DATA_PREFIX = "data: "
STREAM_PATH = f"{API_PREFIX}/events/stream"
CONNECT_TIMEOUT = 10.0


def parse_event_line(line: str) -> StreamEvent | None:
    """Decode one line of the stream, or ``None`` if it carries no event."""
    line = line.rstrip("\r\n")
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    try:
        return StreamEvent.model_validate_json(payload)
    except ValidationError as exc:
        logger.debug("stream_line_skipped", line=payload, error=str(exc))
        return None


def iter_events(lines: Iterable[str]) -> Iterator[StreamEvent]:
    for line in lines:
        event = parse_event_line(line)
        if event is not None:
            yield event


def new_channel() -> asyncio.Queue[StreamEvent]:
    return asyncio.Queue(maxsize=EVENT_CHANNEL_CAPACITY)


class EventStreamConnection:
    """An open event stream response. Single use."""

    def __init__(self, response: httpx.Response):
        self._response = response
        self.delivered = 0
        self.closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def pump(
        self,
        channel: asyncio.Queue[StreamEvent],
        cancel: asyncio.Event | None = None,
    ) -> int:
        """Move events from the response body into ``channel``.

        Returns the number of events delivered once the body ends or
        ``cancel`` is set. The response is closed either way.

        Raises:
            StreamError: If reading the body fails.
        """
        if cancel is None:
            try:
                return await self._read_into(channel)
            finally:
                await self.aclose()

        if cancel.is_set():
            await self.aclose()
            return self.delivered

        reader = asyncio.create_task(self._read_into(channel))
        waiter = asyncio.create_task(cancel.wait())
        try:
            done, _ = await asyncio.wait({reader, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (reader, waiter):
                if not task.done():
                    task.cancel()
            await asyncio.gather(reader, waiter, return_exceptions=True)
            await self.aclose()
        if reader in done:
            return reader.result()
        return self.delivered

    async def _read_into(self, channel: asyncio.Queue[StreamEvent]) -> int:
        try:
            async for line in self._response.aiter_lines():
                event = parse_event_line(line)
                if event is None:
                    continue
                await channel.put(event)
                self.delivered += 1
        except httpx.HTTPError as exc:
            raise StreamError(f"event stream read failed: {exc}") from exc
        return self.delivered

    async def aclose(self) -> None:
        if not self.closed:
            self.closed = True
            await self._response.aclose()


class EventStreamClient:
    """Opens ``/api/v1/events/stream``. Never retries on its own."""

    def __init__(
        self,
        endpoint: str,
        token: str,
        transport: httpx.AsyncBaseTransport | None = None,
        connect_timeout: float = CONNECT_TIMEOUT,
    ):
        self.url = f"{endpoint.rstrip('/')}{STREAM_PATH}"
        self._client = httpx.AsyncClient(
            headers={
                **auth_headers(token),
                "Accept": "text/event-stream",
                "Cache-Control": "no-cache",
            },
            timeout=httpx.Timeout(connect_timeout, read=None),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, transport: httpx.AsyncBaseTransport | None = None):
        return cls(settings.api.endpoint, settings.api.token, transport=transport)

    async def connect(self, cancel: asyncio.Event | None = None) -> EventStreamConnection:
        """Send the request and check the status before any body is read.

        Raises:
            StreamError: On transport failure, non-2xx status or cancellation.
        """
        if cancel is not None and cancel.is_set():
            raise StreamError("event stream cancelled before connecting")
        request = self._client.build_request("GET", self.url)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise StreamError(f"event stream connection failed: {exc}") from exc

        if not response.is_success:
            await response.aclose()
            raise StreamError(
                f"event stream returned status {response.status_code}",
                status_code=response.status_code,
            )
        logger.info("stream_opened", url=self.url)
        return EventStreamConnection(response)

    async def run(
        self,
        channel: asyncio.Queue[StreamEvent],
        cancel: asyncio.Event | None = None,
    ) -> int:
        connection = await self.connect(cancel)
        try:
            return await connection.pump(channel, cancel)
        finally:
            await connection.aclose()
            logger.info("stream_closed", url=self.url, delivered=connection.delivered)

    async def close(self) -> None:
        await self._client.aclose()

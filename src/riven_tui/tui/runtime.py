"""Executes ops as asyncio tasks and feeds their messages back to the app.

The runtime owns the only cancellation scope in the process: one
``asyncio.Event`` plus the set of running tasks. A cancelled task never
delivers its message.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from riven_tui.api.client import RivenClient
from riven_tui.api.errors import RivenError, StreamError
from riven_tui.api.events import EventStreamClient, EventStreamConnection, new_channel
from riven_tui.models import StreamEvent
from riven_tui.tui.messages import (
    CommandFinished,
    FetchResult,
    StreamEnded,
    StreamEventReceived,
    StreamIdle,
    StreamOpened,
    TimerFired,
)
from riven_tui.tui.ops import (
    CloseStream,
    Delay,
    Emit,
    EnterFullScreen,
    Fetch,
    ListenStream,
    Op,
    OpenStream,
    PumpStream,
    Quit,
    RunCommand,
    StartTimer,
)
from riven_tui.tui.types import Resource
from riven_tui.utils.logging import get_logger

logger = get_logger(__name__)

# How long one ListenStream op waits before answering StreamIdle.
LISTEN_POLL_SECONDS = 1.0


@dataclass
class _StreamSession:
    channel: asyncio.Queue[StreamEvent] = field(default_factory=new_channel)
    connection: EventStreamConnection | None = None


class Runtime:
    """Runs ops produced by ``router.handle``.

    Args:
        client: REST gateway used by fetches and commands.
        stream_client: Opens the event stream.
        deliver: Called with each produced message, on the event loop.
        on_quit: Called when a ``Quit`` op is submitted.
    """

    def __init__(
        self,
        client: RivenClient,
        stream_client: EventStreamClient,
        deliver: Callable[[Any], None],
        on_quit: Callable[[], None] | None = None,
        listen_poll: float = LISTEN_POLL_SECONDS,
    ):
        self.client = client
        self.stream_client = stream_client
        self.deliver = deliver
        self.on_quit = on_quit
        self.listen_poll = listen_poll
        self.cancel = asyncio.Event()
        self._tasks: set[asyncio.Task] = set()
        self._stream_tasks: dict[int, set[asyncio.Task]] = {}
        self._streams: dict[int, _StreamSession] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, ops: list[Op]) -> None:
        for op in ops:
            self._start(op)

    def _start(self, op: Op) -> None:
        if self.cancel.is_set():
            return
        if isinstance(op, Quit):
            if self.on_quit is not None:
                self.on_quit()
            return
        if isinstance(op, EnterFullScreen):
            # Textual already runs on the alternate screen.
            return
        if isinstance(op, CloseStream):
            self._close_stream(op.generation)
            return

        task = asyncio.create_task(self._run(op), name=type(op).__name__)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        generation = getattr(op, "generation", None)
        if generation is not None:
            group = self._stream_tasks.setdefault(generation, set())
            group.add(task)
            task.add_done_callback(group.discard)

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("op_crashed", op=task.get_name(), exc_info=exc)

    async def _run(self, op: Op) -> None:
        msg = await self._execute(op)
        if msg is not None and not self.cancel.is_set():
            self.deliver(msg)

    async def _execute(self, op: Op) -> Any:
        if isinstance(op, Fetch):
            return await self._fetch(op)
        if isinstance(op, RunCommand):
            return await self._command(op)
        if isinstance(op, StartTimer):
            await asyncio.sleep(op.seconds)
            return TimerFired(op.screen, op.token)
        if isinstance(op, Delay):
            await asyncio.sleep(op.seconds)
            return op.message
        if isinstance(op, Emit):
            return op.message
        if isinstance(op, OpenStream):
            return await self._open_stream(op.generation)
        if isinstance(op, PumpStream):
            return await self._pump_stream(op.generation)
        if isinstance(op, ListenStream):
            return await self._listen_stream(op.generation)
        raise TypeError(f"unknown op: {op!r}")

    # -- requests ---------------------------------------------------------

    async def _call(self, op: Fetch) -> Any:
        client = self.client
        if op.resource is Resource.STATS:
            return await client.get_stats()
        if op.resource is Resource.SERVICES:
            return await client.get_services()
        if op.resource is Resource.RD_USER:
            return await client.get_rd_user()
        if op.resource is Resource.ITEMS:
            return await client.get_items(op.query)
        if op.resource is Resource.STATES:
            return await client.get_states()
        if op.resource is Resource.ITEM:
            return await client.get_item(op.item_id, with_streams=True)
        if op.resource is Resource.ITEM_STREAMS:
            return await client.get_item_streams(op.item_id)
        if op.resource is Resource.LOGS:
            return await client.get_logs()
        if op.resource is Resource.SETTINGS:
            return await client.get_all_settings()
        raise ValueError(f"unknown resource: {op.resource}")

    async def _fetch(self, op: Fetch) -> FetchResult:
        try:
            data = await self._call(op)
        except RivenError as exc:
            logger.warning("fetch_failed", screen=op.screen.value, resource=op.resource.value, error=str(exc))
            return FetchResult(op.screen, op.resource, error=str(exc), visit=op.visit)
        return FetchResult(op.screen, op.resource, data=data, visit=op.visit)

    async def _command(self, op: RunCommand) -> CommandFinished:
        try:
            response = await self.client.run_action(op.action, op.ids)
        except RivenError as exc:
            return CommandFinished(op.origin, op.action, op.ids, error=str(exc), visit=op.visit)
        return CommandFinished(op.origin, op.action, op.ids, message=response.message, visit=op.visit)

    # -- event stream -----------------------------------------------------

    async def _open_stream(self, generation: int) -> StreamOpened | StreamEnded:
        session = _StreamSession()
        self._streams[generation] = session
        try:
            session.connection = await self.stream_client.connect(self.cancel)
        except StreamError as exc:
            self._streams.pop(generation, None)
            logger.warning("stream_open_failed", generation=generation, error=str(exc))
            return StreamEnded(generation, str(exc))
        return StreamOpened(generation)

    async def _pump_stream(self, generation: int) -> StreamEnded:
        session = self._streams.get(generation)
        if session is None or session.connection is None:
            return StreamEnded(generation, "event stream is not open")
        error = None
        try:
            await session.connection.pump(session.channel, self.cancel)
        except StreamError as exc:
            error = str(exc)
        # Report the end only after the listener has taken every event.
        await session.channel.join()
        self._streams.pop(generation, None)
        logger.info("stream_ended", generation=generation, error=error)
        return StreamEnded(generation, error)

    async def _listen_stream(self, generation: int) -> StreamEventReceived | StreamIdle:
        session = self._streams.get(generation)
        if session is None:
            await asyncio.sleep(self.listen_poll)
            return StreamIdle(generation)
        try:
            event = await asyncio.wait_for(session.channel.get(), timeout=self.listen_poll)
        except asyncio.TimeoutError:
            return StreamIdle(generation)
        session.channel.task_done()
        return StreamEventReceived(generation, event)

    def _close_stream(self, generation: int) -> None:
        for task in list(self._stream_tasks.pop(generation, ())):
            task.cancel()
        session = self._streams.pop(generation, None)
        if session is not None and session.connection is not None:
            task = asyncio.create_task(session.connection.aclose(), name="CloseStream")
            self._tasks.add(task)
            task.add_done_callback(self._finished)
        logger.info("stream_closed", generation=generation)

    async def shutdown(self) -> None:
        """Cancel everything, close open streams and both clients."""
        self.cancel.set()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        for session in self._streams.values():
            if session.connection is not None:
                await session.connection.aclose()
        self._streams.clear()
        self._stream_tasks.clear()
        await self.stream_client.close()
        await self.client.close()

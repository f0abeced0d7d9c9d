"""Background task that routes inbound frames to pending calls.

The dispatcher owns the transport's read side and the pending-call table.
Senders reach the table only through the command queue, so the table has a
single writer and needs no lock.
"""

from __future__ import annotations

import asyncio
import contextlib

from loguru import logger

from .errors import CallAbandonedError, ChannelClosedError, QueryError, ResponseDecodeError
from .pending import Deregister, PendingCallTable, Register
from .protocol import ResponseEnvelope
from .serialization import decode_response
from .transport import Transport

Command = Register | Deregister


class Dispatcher:
    """Demultiplexes responses from one transport by request id."""

    def __init__(self, transport: Transport):
        self._transport = transport
        self._table = PendingCallTable()
        self._commands: asyncio.Queue[Command] = asyncio.Queue()
        self._queued_ids: set[str] = set()
        self._task: asyncio.Task[None] | None = None
        self._closed = False
        self._close_reason = "connection closed"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        """Calls registered and not yet resolved, including queued registrations."""
        return len(self._table) + len(self._queued_ids)

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="surreal-rpc-dispatcher")

    def is_live(self, request_id: str) -> bool:
        return request_id in self._table or request_id in self._queued_ids

    def register(self, request_id: str, future: asyncio.Future[ResponseEnvelope]) -> None:
        """Queue a registration. Must be called before the frame is written."""
        if self._closed:
            raise ChannelClosedError()
        self._queued_ids.add(request_id)
        self._commands.put_nowait(Register(request_id, future))

    def deregister(self, request_id: str) -> None:
        if self._closed:
            return
        self._commands.put_nowait(Deregister(request_id))

    async def stop(self, reason: str = "client closed") -> None:
        """Stop the loop and abandon every call still pending."""
        task = self._task
        if task is None:
            self._close_reason = reason
            self._shutdown()
            return
        if not task.done():
            self._close_reason = reason
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        # A task cancelled before its first step never reaches its finally block.
        self._shutdown()

    async def wait_closed(self) -> None:
        """Block until the read side has ended and pending calls were abandoned."""
        if self._task is None:
            return
        await asyncio.wait({self._task})

    async def _run(self) -> None:
        command_task: asyncio.Task[Command] | None = None
        frame_task: asyncio.Task[str | bytes | None] | None = None
        try:
            while True:
                if command_task is None:
                    command_task = asyncio.ensure_future(self._commands.get())
                if frame_task is None:
                    frame_task = asyncio.ensure_future(self._transport.recv())
                done, _ = await asyncio.wait({command_task, frame_task}, return_when=asyncio.FIRST_COMPLETED)
                if command_task in done:
                    self._apply(command_task.result())
                    command_task = None
                if frame_task in done:
                    finished, frame_task = frame_task, None
                    # Registrations queued before the frame was written must land first.
                    self._drain_commands()
                    try:
                        raw = finished.result()
                    except Exception as exc:
                        logger.warning("Transport read failed: {}", exc)
                        self._close_reason = f"transport read failed: {exc}"
                        break
                    if raw is None:
                        break
                    self._handle_frame(raw)
        finally:
            if command_task is not None and command_task.done() and not command_task.cancelled():
                # Taken off the queue in the same tick the loop was stopped.
                self._apply(command_task.result())
            leftovers = [t for t in (command_task, frame_task) if t is not None and not t.done()]
            for task in leftovers:
                task.cancel()
            self._shutdown()
            if leftovers:
                await asyncio.gather(*leftovers, return_exceptions=True)

    def _drain_commands(self) -> None:
        while True:
            try:
                command = self._commands.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._apply(command)

    def _apply(self, command: Command) -> None:
        if isinstance(command, Deregister):
            if self._table.pop(command.request_id) is not None:
                logger.debug("Deregistered call {}", command.request_id)
            return
        self._queued_ids.discard(command.request_id)
        if command.future.done():
            return
        displaced = self._table.insert(command.request_id, command.future)
        if displaced is not None and not displaced.done():
            logger.warning("Request id {} registered twice; abandoning the older call", command.request_id)
            displaced.set_exception(CallAbandonedError(command.request_id, "request id reused"))

    def _handle_frame(self, raw: str | bytes) -> None:
        try:
            if not isinstance(raw, str):
                logger.debug("Ignoring non-text frame ({} bytes)", len(raw))
                return
            try:
                envelope = decode_response(raw)
            except ResponseDecodeError as exc:
                self._fail_undecodable(raw, exc)
                return
            future = self._table.pop(envelope.id)
            if future is None:
                logger.debug("Dropping response for unknown id {}", envelope.id)
                return
            if future.done():
                # Caller stopped waiting before the response arrived.
                return
            if envelope.error is not None:
                future.set_exception(QueryError(envelope.id, envelope.error.code, envelope.error.message))
            else:
                future.set_result(envelope)
        except Exception:
            logger.exception("Unexpected error while dispatching frame")

    def _fail_undecodable(self, raw: str, exc: ResponseDecodeError) -> None:
        future = self._table.pop(exc.request_id) if exc.request_id else None
        if future is None:
            logger.warning("Dropping undecodable frame: {} ({})", raw[:200], exc.message)
            return
        if not future.done():
            future.set_exception(exc)

    def _shutdown(self) -> None:
        if self._closed:
            return
        self._drain_commands()
        self._closed = True
        abandoned = self._table.abandon_all(self._close_reason)
        self._queued_ids.clear()
        logger.info("Dispatcher stopped ({}); {} pending call(s) abandoned", self._close_reason, abandoned)

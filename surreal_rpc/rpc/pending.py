"""Pending-call table and the caller-facing completion handle."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any

from .errors import CallAbandonedError, CallTimeoutError
from .protocol import ResponseEnvelope


@dataclass(slots=True, frozen=True)
class Register:
    """Registration command: route responses for ``request_id`` to ``future``."""

    request_id: str
    future: asyncio.Future[ResponseEnvelope]


@dataclass(slots=True, frozen=True)
class Deregister:
    """Removal command sent when a caller stops waiting or a send fails."""

    request_id: str


class PendingCallTable:
    """Maps request id to its completion future.

    Only the dispatcher task mutates an instance.
    """

    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Future[ResponseEnvelope]] = {}

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def insert(
        self, request_id: str, future: asyncio.Future[ResponseEnvelope]
    ) -> asyncio.Future[ResponseEnvelope] | None:
        """Insert an entry, returning any future it displaced."""
        displaced = self._entries.get(request_id)
        self._entries[request_id] = future
        return displaced if displaced is not future else None

    def pop(self, request_id: str) -> asyncio.Future[ResponseEnvelope] | None:
        return self._entries.pop(request_id, None)

    def abandon_all(self, reason: str) -> int:
        """Fail every pending future with CallAbandonedError and clear the table."""
        count = 0
        for request_id, future in self._entries.items():
            if not future.done():
                future.set_exception(CallAbandonedError(request_id, reason))
                count += 1
        self._entries.clear()
        return count


class PendingResponse:
    """Awaitable handle for one in-flight call.

    Awaiting yields the ResponseEnvelope. Cancelling the handle, or the task
    awaiting it, removes the call from the pending table.
    """

    def __init__(
        self,
        request_id: str,
        future: asyncio.Future[ResponseEnvelope],
        deregister: Callable[[str], Any],
    ) -> None:
        self.request_id = request_id
        self._future = future
        self._deregister = deregister
        future.add_done_callback(self._on_done)

    def _on_done(self, future: asyncio.Future[ResponseEnvelope]) -> None:
        if future.cancelled():
            self._deregister(self.request_id)
        else:
            # Mark the outcome as observed so abandoned handles don't warn at GC.
            future.exception()

    def __await__(self) -> Generator[Any, None, ResponseEnvelope]:
        return self._future.__await__()

    def __repr__(self) -> str:
        state = "done" if self._future.done() else "pending"
        return f"<PendingResponse id={self.request_id} {state}>"

    def done(self) -> bool:
        return self._future.done()

    def cancel(self) -> bool:
        """Stop waiting for the response and drop the pending entry."""
        return self._future.cancel()

    async def wait(self, timeout: float | None = None) -> ResponseEnvelope:
        """Await the response, giving up after ``timeout`` seconds."""
        if timeout is None:
            return await self._future
        try:
            return await asyncio.wait_for(self._future, timeout)
        except asyncio.TimeoutError as exc:
            raise CallTimeoutError(self.request_id, timeout) from exc

"""Message-framed duplex transports used by the dispatcher."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed, WebSocketException

from .errors import TransportError


class Transport(Protocol):
    """What the client needs from a connection.

    ``recv`` returns one whole frame, or ``None`` once the read side has ended.
    """

    async def send(self, text: str) -> None: ...

    async def recv(self) -> str | bytes | None: ...

    async def close(self) -> None: ...


class WebSocketTransport:
    """`websockets` connection with serialized writes."""

    def __init__(self, ws: Any, url: str = ""):
        self._ws = ws
        self.url = url
        self._write_lock = asyncio.Lock()

    @classmethod
    async def connect(
        cls,
        url: str,
        *,
        open_timeout: float | None = 10.0,
        ping_interval: float | None = 20.0,
        max_size: int | None = 2**24,
    ) -> "WebSocketTransport":
        logger.info("Connecting to {}", url)
        try:
            ws = await websockets.connect(
                url,
                open_timeout=open_timeout,
                ping_interval=ping_interval,
                max_size=max_size,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            raise TransportError(f"failed to connect: {exc}", url=url) from exc
        logger.info("Connected to {}", url)
        return cls(ws, url)

    async def send(self, text: str) -> None:
        async with self._write_lock:
            try:
                await self._ws.send(text)
            except (OSError, WebSocketException) as exc:
                raise TransportError(f"failed to send frame: {exc}", url=self.url) from exc

    async def recv(self) -> str | bytes | None:
        try:
            return await self._ws.recv()
        except ConnectionClosed as exc:
            logger.info("Connection to {} closed: {}", self.url, exc)
            return None
        except OSError as exc:
            logger.warning("Socket error on {}: {}", self.url, exc)
            return None

    async def close(self) -> None:
        try:
            await self._ws.close()
        except (OSError, WebSocketException) as exc:
            raise TransportError(f"failed to close connection: {exc}", url=self.url) from exc

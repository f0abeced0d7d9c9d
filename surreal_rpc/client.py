"""Async client for the database's WebSocket RPC endpoint."""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from surreal_rpc.config.schema import ClientConfig
from surreal_rpc.response import (
    first_key_result_of_statement,
    first_result_of_statement,
    key_results_of_statement,
    results_of_statement,
)
from surreal_rpc.rpc.dispatcher import Dispatcher
from surreal_rpc.rpc.errors import ResultDecodeError
from surreal_rpc.rpc.ids import allocate_request_id
from surreal_rpc.rpc.pending import PendingResponse
from surreal_rpc.rpc.protocol import ResponseEnvelope, RpcRequest
from surreal_rpc.rpc.serialization import encode_request
from surreal_rpc.rpc.transport import Transport, WebSocketTransport


def _decode(value: Any, model: Any) -> Any:
    if model is None:
        return value
    try:
        return TypeAdapter(model).validate_python(value)
    except ValidationError as exc:
        target = getattr(model, "__name__", None) or repr(model)
        raise ResultDecodeError(target, str(exc)) from exc


class SurrealClient:
    """Issues concurrent RPC calls over one connection.

    Must be created inside a running event loop; the dispatcher task starts
    immediately and owns the read side of ``transport``.
    """

    def __init__(self, transport: Transport, *, request_timeout: float | None = None):
        self._transport = transport
        self._dispatcher = Dispatcher(transport)
        self._dispatcher.start()
        self._closed = False
        self.request_timeout = request_timeout

    @classmethod
    async def connect(
        cls,
        url: str,
        *,
        request_timeout: float | None = None,
        open_timeout: float | None = 10.0,
        ping_interval: float | None = 20.0,
        max_size: int | None = 2**24,
    ) -> SurrealClient:
        transport = await WebSocketTransport.connect(
            url,
            open_timeout=open_timeout,
            ping_interval=ping_interval,
            max_size=max_size,
        )
        return cls(transport, request_timeout=request_timeout)

    @classmethod
    async def from_config(cls, config: ClientConfig | None = None) -> SurrealClient:
        """Connect, then sign in and select a namespace when configured."""
        cfg = config or ClientConfig()
        client = await cls.connect(
            cfg.url,
            request_timeout=cfg.request_timeout,
            open_timeout=cfg.open_timeout,
            ping_interval=cfg.ping_interval,
            max_size=cfg.max_message_size,
        )
        try:
            if cfg.has_credentials:
                await client.signin(cfg.username or "", cfg.password or "")
            if cfg.has_namespace:
                await client.use_namespace(cfg.namespace or "", cfg.database or "")
        except BaseException:
            await client.close()
            raise
        return client

    async def __aenter__(self) -> SurrealClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed or self._dispatcher.closed

    @property
    def pending_count(self) -> int:
        return self._dispatcher.pending_count

    async def send_message(self, method: str, params: Any = None) -> PendingResponse:
        """Send one request and return the handle its response will resolve.

        The handle is registered with the dispatcher before the frame is
        written, so an immediate reply cannot miss it.
        """
        request_id = allocate_request_id(self._dispatcher.is_live)
        frame = encode_request(RpcRequest(id=request_id, method=method, params=params))
        future: asyncio.Future[ResponseEnvelope] = asyncio.get_running_loop().create_future()
        self._dispatcher.register(request_id, future)
        pending = PendingResponse(request_id, future, self._dispatcher.deregister)
        try:
            await self._transport.send(frame)
        except BaseException:
            pending.cancel()
            raise
        logger.trace("Sent {} request {}", method, request_id)
        return pending

    async def call(self, method: str, params: Any = None) -> ResponseEnvelope:
        """Send a request and wait for its response, honouring request_timeout."""
        pending = await self.send_message(method, params)
        return await pending.wait(self.request_timeout)

    async def signin(self, user: str, password: str) -> None:
        await self.call("signin", [{"user": user, "pass": password}])

    async def use_namespace(self, namespace: str, database: str) -> None:
        await self.call("use", [namespace, database])

    async def send_query(self, query: str, params: dict[str, Any] | None = None) -> PendingResponse:
        """Send a query and return the raw pending response."""
        return await self.send_message("query", [query, params if params is not None else {}])

    async def query(self, query: str, params: dict[str, Any] | None = None) -> ResponseEnvelope:
        pending = await self.send_query(query, params)
        return await pending.wait(self.request_timeout)

    async def find_one(self, query: str, params: dict[str, Any] | None = None, model: Any = None) -> Any | None:
        """First row of the first statement, decoded as ``model`` when given."""
        response = await self.query(query, params)
        value = first_result_of_statement(response, 0)
        return None if value is None else _decode(value, model)

    async def find_one_key(
        self, key: str, query: str, params: dict[str, Any] | None = None, model: Any = None
    ) -> Any | None:
        """Value of ``key`` in the first row of the first statement that has it."""
        response = await self.query(query, params)
        value = first_key_result_of_statement(response, 0, key)
        return None if value is None else _decode(value, model)

    async def find_many(self, query: str, params: dict[str, Any] | None = None, model: Any = None) -> list[Any]:
        response = await self.query(query, params)
        values = results_of_statement(response, 0)
        return values if model is None else _decode(values, list[model])

    async def find_many_key(
        self, key: str, query: str, params: dict[str, Any] | None = None, model: Any = None
    ) -> list[Any]:
        """Value of ``key`` for every row of the first statement; rows missing it are skipped."""
        response = await self.query(query, params)
        values = key_results_of_statement(response, 0, key)
        return values if model is None else _decode(values, list[model])

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._dispatcher.stop("client closed")
        await self._transport.close()
        logger.info("Client closed")

import asyncio
import json

import pytest
from websockets.exceptions import ConnectionClosedOK

from surreal_rpc.client import SurrealClient
from surreal_rpc.rpc.errors import TransportError
from surreal_rpc.rpc.transport import WebSocketTransport


class SlowWebSocket:
    """Socket double whose send yields between the start and end of each write."""

    def __init__(self):
        self.events: list[tuple[str, str]] = []
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.fail_with: Exception | None = None
        self.closed = False

    async def send(self, text):
        if self.fail_with is not None:
            raise self.fail_with
        self.events.append(("start", text))
        for _ in range(3):
            await asyncio.sleep(0)
        self.events.append(("end", text))

    async def recv(self):
        item = await self.inbound.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True
        self.inbound.put_nowait(ConnectionClosedOK(None, None))


@pytest.mark.asyncio
async def test_concurrent_sends_never_interleave_frames():
    ws = SlowWebSocket()
    client = SurrealClient(WebSocketTransport(ws, "ws://test/rpc"))

    handles = await asyncio.gather(*(client.send_query(f"return {n}") for n in range(10)))

    assert len(ws.events) == 20
    for index in range(0, len(ws.events), 2):
        (kind_a, text_a), (kind_b, text_b) = ws.events[index], ws.events[index + 1]
        assert (kind_a, kind_b) == ("start", "end")
        assert text_a == text_b
    sent_ids = {json.loads(text)["id"] for kind, text in ws.events if kind == "start"}
    assert sent_ids == {h.request_id for h in handles}
    await client.close()
    assert ws.closed


@pytest.mark.asyncio
async def test_connection_closed_ends_the_read_side():
    ws = SlowWebSocket()
    transport = WebSocketTransport(ws, "ws://test/rpc")
    ws.inbound.put_nowait('{"id": "a"}')
    ws.inbound.put_nowait(ConnectionClosedOK(None, None))

    assert await transport.recv() == '{"id": "a"}'
    assert await transport.recv() is None


@pytest.mark.asyncio
async def test_send_failure_raises_transport_error():
    ws = SlowWebSocket()
    ws.fail_with = OSError("broken pipe")
    transport = WebSocketTransport(ws, "ws://test/rpc")

    with pytest.raises(TransportError) as exc_info:
        await transport.send("{}")
    assert exc_info.value.details == {"url": "ws://test/rpc"}

"""
surreal_rpc - async WebSocket RPC client with request/response correlation
"""

__version__ = "0.1.0"

from surreal_rpc.client import SurrealClient
from surreal_rpc.rpc import (
    CallAbandonedError,
    CallTimeoutError,
    ChannelClosedError,
    PendingResponse,
    QueryError,
    RequestEncodingError,
    ResponseDecodeError,
    ResponseEnvelope,
    ResultDecodeError,
    StatementResult,
    SurrealRpcError,
    TransportError,
)

__all__ = [
    "CallAbandonedError",
    "CallTimeoutError",
    "ChannelClosedError",
    "PendingResponse",
    "QueryError",
    "RequestEncodingError",
    "ResponseDecodeError",
    "ResponseEnvelope",
    "ResultDecodeError",
    "StatementResult",
    "SurrealClient",
    "SurrealRpcError",
    "TransportError",
    "__version__",
]

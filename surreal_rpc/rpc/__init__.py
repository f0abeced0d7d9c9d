"""Request/response correlation over a single duplex connection."""

from .dispatcher import Dispatcher
from .errors import (
    CallAbandonedError,
    CallTimeoutError,
    ChannelClosedError,
    ErrorCategory,
    QueryError,
    RequestEncodingError,
    ResponseDecodeError,
    ResultDecodeError,
    SurrealRpcError,
    TransportError,
)
from .ids import allocate_request_id, new_request_id
from .pending import PendingCallTable, PendingResponse
from .protocol import ResponseEnvelope, RpcError, RpcRequest, StatementResult
from .serialization import decode_response, encode_request, extract_frame_id
from .transport import Transport, WebSocketTransport

__all__ = [
    "CallAbandonedError",
    "CallTimeoutError",
    "ChannelClosedError",
    "Dispatcher",
    "ErrorCategory",
    "PendingCallTable",
    "PendingResponse",
    "QueryError",
    "RequestEncodingError",
    "ResponseDecodeError",
    "ResponseEnvelope",
    "ResultDecodeError",
    "RpcError",
    "RpcRequest",
    "StatementResult",
    "SurrealRpcError",
    "Transport",
    "TransportError",
    "WebSocketTransport",
    "allocate_request_id",
    "decode_response",
    "encode_request",
    "extract_frame_id",
    "new_request_id",
]

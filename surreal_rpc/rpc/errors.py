"""
Exception hierarchy for the RPC client.

Provides:
- A base error carrying a code, a category and structured details
- One subclass per failure a caller can observe while awaiting a call
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    TRANSPORT = "transport"
    ENCODING = "encoding"
    ABANDONED = "abandoned"
    TIMEOUT = "timeout"
    APPLICATION = "application"


class SurrealRpcError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        message: str,
        code: str = "RPC_ERROR",
        category: ErrorCategory = ErrorCategory.TRANSPORT,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportError(SurrealRpcError):
    """Socket connect, write or close failure."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, code="TRANSPORT_ERROR", category=ErrorCategory.TRANSPORT, details=details)


class ChannelClosedError(SurrealRpcError):
    """The dispatcher is no longer accepting registrations."""

    def __init__(self, message: str = "rpc channel is closed"):
        super().__init__(message, code="CHANNEL_CLOSED", category=ErrorCategory.TRANSPORT)


class RequestEncodingError(SurrealRpcError):
    """Request params could not be serialized; nothing was sent."""

    def __init__(self, method: str, reason: str):
        super().__init__(
            f"Failed to encode '{method}' request: {reason}",
            code="REQUEST_ENCODING_ERROR",
            category=ErrorCategory.ENCODING,
            details={"method": method},
        )


class ResponseDecodeError(SurrealRpcError):
    """An inbound frame could not be decoded into a response envelope."""

    def __init__(self, reason: str, request_id: str | None = None):
        super().__init__(
            f"Failed to decode response: {reason}",
            code="RESPONSE_DECODE_ERROR",
            category=ErrorCategory.ENCODING,
            details={"request_id": request_id} if request_id else {},
        )
        self.request_id = request_id


class CallAbandonedError(SurrealRpcError):
    """The connection ended before the matching response arrived."""

    def __init__(self, request_id: str, reason: str = "connection closed"):
        super().__init__(
            f"Call {request_id} abandoned: {reason}",
            code="CALL_ABANDONED",
            category=ErrorCategory.ABANDONED,
            details={"request_id": request_id},
        )
        self.request_id = request_id


class CallTimeoutError(SurrealRpcError):
    """Caller stopped waiting; its pending entry has been removed."""

    def __init__(self, request_id: str, timeout_seconds: float):
        super().__init__(
            f"Call {request_id} timed out after {timeout_seconds}s",
            code="CALL_TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"request_id": request_id, "timeout_seconds": timeout_seconds},
        )
        self.request_id = request_id


class QueryError(SurrealRpcError):
    """The server reported that the call itself failed."""

    def __init__(self, request_id: str, server_code: int, message: str):
        super().__init__(
            message,
            code="QUERY_ERROR",
            category=ErrorCategory.APPLICATION,
            details={"request_id": request_id, "server_code": server_code},
        )
        self.request_id = request_id
        self.server_code = server_code


class ResultDecodeError(SurrealRpcError):
    """A delivered result did not match the type the caller asked for."""

    def __init__(self, target: str, reason: str):
        super().__init__(
            f"Failed to decode result as {target}: {reason}",
            code="RESULT_DECODE_ERROR",
            category=ErrorCategory.ENCODING,
            details={"target": target},
        )

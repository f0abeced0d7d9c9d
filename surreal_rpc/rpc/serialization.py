"""Serialization helpers for RPC frames."""

from __future__ import annotations

import json
import re
from typing import Any

from .errors import RequestEncodingError, ResponseDecodeError
from .protocol import RpcError, RpcRequest, ResponseEnvelope, StatementResult


def safe_dict(value: Any) -> dict[str, Any]:
    """Return the value when dict-like, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def encode_request(request: RpcRequest) -> str:
    """Encode a request frame into one JSON text message."""
    payload = {"id": request.id, "method": request.method, "params": request.params}
    try:
        return json.dumps(payload, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise RequestEncodingError(request.method, str(exc)) from exc


_ID_PATTERN = re.compile(r'"id"\s*:\s*"([^"\\]+)"')


def extract_frame_id(text: str | bytes) -> str | None:
    """Best-effort id lookup for frames that failed to decode."""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        match = _ID_PATTERN.search(text)
        return match.group(1) if match else None
    req_id = safe_dict(payload).get("id")
    return req_id if isinstance(req_id, str) and req_id else None


def _is_statement(row: Any) -> bool:
    """A statement result has string time and status, and only list or string payloads.

    Payloads sit under ``result``, ``detail`` or an alias. Records always carry
    an ``id``; statement results never do.
    """
    if not isinstance(row, dict) or "id" in row:
        return False
    if not isinstance(row.get("time"), str) or not isinstance(row.get("status"), str):
        return False
    return all(
        value is None or isinstance(value, (list, str))
        for key, value in row.items()
        if key not in ("time", "status")
    )


def _is_statement_list(value: Any) -> bool:
    # Records that merely carry a "status" field stay raw.
    return isinstance(value, list) and bool(value) and all(_is_statement(row) for row in value)


def decode_statement(row: dict[str, Any]) -> StatementResult:
    result = row.get("result")
    if result is None:
        rows: list[Any] = []
    elif isinstance(result, list):
        rows = result
    else:
        # Failed statements carry their message as a string.
        rows = [result]
    return StatementResult(
        time=str(row.get("time") or ""),
        status=str(row.get("status") or ""),
        result=rows,
        raw=dict(row),
    )


def normalize_rpc_error(error: Any) -> RpcError:
    """Normalize unknown error payloads into RpcError."""
    row = safe_dict(error)
    code = row.get("code")
    return RpcError(
        code=code if isinstance(code, int) and not isinstance(code, bool) else 0,
        message=str(row.get("message") or (error if isinstance(error, str) else "") or "rpc failed"),
    )


def decode_response_payload(payload: Any) -> ResponseEnvelope:
    """Decode an already-parsed JSON payload into a ResponseEnvelope."""
    if not isinstance(payload, dict):
        raise ResponseDecodeError(f"expected a JSON object, got {type(payload).__name__}")
    req_id = payload.get("id")
    if not isinstance(req_id, str) or not req_id:
        raise ResponseDecodeError("missing string id")
    if payload.get("error") is not None:
        return ResponseEnvelope(id=req_id, error=normalize_rpc_error(payload["error"]))
    result = payload.get("result")
    if _is_statement_list(result):
        return ResponseEnvelope(id=req_id, result=[decode_statement(row) for row in result])
    return ResponseEnvelope(id=req_id, result=result)


def decode_response(text: str | bytes) -> ResponseEnvelope:
    """Decode one raw inbound text frame.

    Raises ResponseDecodeError; ``request_id`` is set on it when the frame
    still carried a usable id.
    """
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise ResponseDecodeError(f"invalid JSON: {exc}", request_id=extract_frame_id(text)) from exc
    return decode_response_payload(payload)

"""Correlation id generation."""

from __future__ import annotations

import uuid
from collections.abc import Callable

MAX_ALLOCATION_ATTEMPTS = 8


def new_request_id() -> str:
    """Return a 128-bit random id as 32 lowercase hex characters."""
    return uuid.uuid4().hex


def allocate_request_id(
    is_live: Callable[[str], bool],
    *,
    factory: Callable[[], str] = new_request_id,
) -> str:
    """Draw ids until one is not currently in flight."""
    for _ in range(MAX_ALLOCATION_ATTEMPTS):
        req_id = factory()
        if not is_live(req_id):
            return req_id
    raise RuntimeError(f"could not allocate a free request id after {MAX_ALLOCATION_ATTEMPTS} attempts")

"""Navigation helpers over delivered query responses."""

from __future__ import annotations

from typing import Any

from surreal_rpc.rpc.protocol import ResponseEnvelope


def results_of_statement(envelope: ResponseEnvelope, n: int) -> list[Any]:
    """All rows returned by the Nth statement, or an empty list."""
    statement = envelope.statement(n)
    return statement.results() if statement is not None else []


def first_result_of_statement(envelope: ResponseEnvelope, n: int) -> Any | None:
    """First row returned by the Nth statement."""
    statement = envelope.statement(n)
    return statement.first() if statement is not None else None


def key_results_of_statement(envelope: ResponseEnvelope, n: int, key: str) -> list[Any]:
    """Value of ``key`` for every row of the Nth statement that has it."""
    statement = envelope.statement(n)
    return statement.results_key(key) if statement is not None else []


def first_key_result_of_statement(envelope: ResponseEnvelope, n: int, key: str) -> Any | None:
    values = key_results_of_statement(envelope, n, key)
    return values[0] if values else None


def failed_statements(envelope: ResponseEnvelope) -> list[tuple[int, str]]:
    """Index and message of each statement whose status is not OK."""
    failures: list[tuple[int, str]] = []
    for index, statement in enumerate(envelope.statements):
        if not statement.ok:
            detail = statement.raw.get("detail") or statement.first() or statement.status
            failures.append((index, str(detail)))
    return failures

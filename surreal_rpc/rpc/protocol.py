"""RPC frame models exchanged with the database over the /rpc socket."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_ALIAS = "result"


@dataclass(slots=True, frozen=True)
class RpcError:
    """Call-level failure reported by the server in place of a result."""

    code: int
    message: str


@dataclass(slots=True, frozen=True)
class RpcRequest:
    """Outbound request frame."""

    id: str
    method: str
    params: Any


@dataclass(slots=True, frozen=True)
class StatementResult:
    """Result of one statement of a (possibly multi-statement) query."""

    time: str
    status: str
    result: list[Any] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status.upper() == "OK"

    def aliased(self, alias: str | None = None) -> list[Any] | None:
        """Return the list stored under ``alias`` (``result`` by default)."""
        key = alias or DEFAULT_ALIAS
        if key == DEFAULT_ALIAS and not self.raw:
            return self.result
        value = self.raw.get(key)
        return value if isinstance(value, list) else None

    def results(self) -> list[Any]:
        return self.result

    def first(self) -> Any | None:
        return self.result[0] if self.result else None

    def results_key(self, key: str) -> list[Any]:
        """Values of ``key`` across rows; rows without the key are skipped."""
        return [row[key] for row in self.result if isinstance(row, dict) and key in row]


@dataclass(slots=True, frozen=True)
class ResponseEnvelope:
    """Decoded inbound frame.

    ``result`` is ``None``, a plain string, a list of :class:`StatementResult`
    or, for replies that are neither, the raw JSON value as sent.
    """

    id: str
    result: Any = None
    error: RpcError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def statements(self) -> list[StatementResult]:
        if isinstance(self.result, list) and all(isinstance(s, StatementResult) for s in self.result):
            return self.result
        return []

    def statement(self, n: int) -> StatementResult | None:
        statements = self.statements
        if 0 <= n < len(statements):
            return statements[n]
        return None

    def get_nth_query_result(self, n: int) -> StatementResult | None:
        return self.statement(n)

    def get_nth_aliased_results(self, n: int, alias: str | None = None) -> list[Any] | None:
        """Return the list stored under ``alias`` in the Nth statement.

        With a reply such as::

            [{"result": [{"name": "x"}]}, {"friends": [{"name": "y"}]}]

        ``get_nth_aliased_results(0)`` returns ``[{"name": "x"}]`` and
        ``get_nth_aliased_results(1, "friends")`` returns ``[{"name": "y"}]``.
        """
        statements = self.statements
        if not statements and isinstance(self.result, list):
            # Not statement-shaped; look the alias up on the raw element.
            row = self.result[n] if 0 <= n < len(self.result) else None
            value = row.get(alias or DEFAULT_ALIAS) if isinstance(row, dict) else None
            return value if isinstance(value, list) else None
        statement = self.statement(n)
        if statement is None:
            return None
        return statement.aliased(alias)

    def get_aliased_results(self, alias: str | None = None) -> list[Any] | None:
        return self.get_nth_aliased_results(0, alias)

    def get_results(self) -> list[Any] | None:
        return self.get_aliased_results(None)

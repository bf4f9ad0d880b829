"""Envelope models shared by the JSON-RPC dialect codecs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Dialect(str, Enum):
    """Supported JSON-RPC wire grammars."""

    V11 = "1.1"
    V20 = "2.0"

    @classmethod
    def coerce(cls, value: "Dialect | str") -> "Dialect":
        if isinstance(value, Dialect):
            return value
        try:
            return cls(str(value).strip())
        except ValueError as exc:
            raise ValueError(f"unsupported JSON-RPC dialect: {value!r}") from exc


# JSON-RPC reserved error codes used when the response itself is broken.
PARSE_ERROR_CODE = -32700
INVALID_ENVELOPE_CODE = -32600
# Dialect "1.1" servers historically reported unparseable bodies with code 100.
LEGACY_PARSE_ERROR_CODE = 100


@dataclass(slots=True)
class RequestEnvelope:
    """One outgoing call, tagged with the dialect that will encode it."""

    dialect: Dialect
    method: str
    id: str
    params: Any = None
    has_params: bool = True

    def to_wire(self) -> dict[str, Any]:
        if self.dialect is Dialect.V11:
            return {"version": "1.1", "method": self.method, "id": self.id, "params": self.params}
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": self.method, "id": self.id}
        if self.has_params:
            payload["params"] = self.params
        return payload


@dataclass(slots=True)
class ResultEnvelope:
    """Successful response envelope."""

    dialect: Dialect
    id: str | int | float | None
    result: Any


@dataclass(slots=True)
class ErrorEnvelope:
    """Error response envelope returned by the remote method."""

    dialect: Dialect
    id: str | int | float | None
    code: Any
    message: str
    data: Any = None
    name: str | None = None
    detail: Any = None
    raw: dict[str, Any] = field(default_factory=dict)


ResponseEnvelope = Union[ResultEnvelope, ErrorEnvelope]

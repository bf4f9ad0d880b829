"""Dialect -> codec dispatch."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from kbaserpc.comm.jsonrpc11 import JSONRPC11Codec
from kbaserpc.comm.jsonrpc20 import JSONRPC20Codec
from kbaserpc.comm.protocol import Dialect, RequestEnvelope, ResponseEnvelope


@runtime_checkable
class Codec(Protocol):
    dialect: Dialect

    def build_request(self, method: str, params: Any = None) -> RequestEnvelope: ...
    def parse_response(self, raw_text: str) -> ResponseEnvelope: ...


_CODECS: dict[Dialect, Codec] = {
    Dialect.V11: JSONRPC11Codec(),
    Dialect.V20: JSONRPC20Codec(),
}


def get_codec(dialect: Dialect | str) -> Codec:
    """Return the codec for a dialect; codecs are stateless and shared."""
    return _CODECS[Dialect.coerce(dialect)]

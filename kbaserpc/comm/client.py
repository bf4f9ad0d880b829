"""JSON-RPC client: codec + HTTP invoker behind a single ``call``."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from kbaserpc.comm.codec import Codec, get_codec
from kbaserpc.comm.errors import ProtocolError, RPCError, TransportError, is_retryable_status
from kbaserpc.comm.protocol import Dialect, ErrorEnvelope
from kbaserpc.comm.transport import HttpInvoker

DEFAULT_TIMEOUT = 10.0


class JSONRPCClient:
    """Call methods on one JSON-RPC endpoint using one dialect."""

    def __init__(
        self,
        url: str,
        *,
        dialect: Dialect | str = Dialect.V20,
        timeout: float = DEFAULT_TIMEOUT,
        authorization: str | None = None,
        invoker: HttpInvoker | None = None,
    ):
        self.url = url
        self.dialect = Dialect.coerce(dialect)
        self.timeout = timeout
        self.authorization = authorization
        self.codec: Codec = get_codec(self.dialect)
        self.invoker = invoker or HttpInvoker()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.authorization:
            headers["Authorization"] = self.authorization
        return headers

    async def call(self, method: str, params: Any = None, *, timeout: float | None = None) -> Any:
        """
        Invoke ``method`` and return the decoded result.

        Dialect "1.1" returns the raw result array; dialect "2.0" returns the
        result value as sent. Remote error envelopes raise RPCError.
        """
        request = self.codec.build_request(method, params)
        body = json.dumps(request.to_wire())
        effective_timeout = timeout if timeout is not None else self.timeout
        logger.debug(f"rpc call {method} -> {self.url} (dialect {self.dialect.value}, id {request.id})")

        response = await self.invoker.post(
            self.url,
            body,
            headers=self._headers(),
            timeout=effective_timeout,
        )

        try:
            envelope = self.codec.parse_response(response.text)
        except ProtocolError as exc:
            if response.ok:
                raise
            raise TransportError(
                f"rpc http error {response.status_code}: POST {self.url}: {exc.message}",
                url=self.url,
                code="TRANSPORT_HTTP_ERROR",
                status_code=response.status_code,
                retryable=is_retryable_status(response.status_code),
            ) from exc

        if isinstance(envelope, ErrorEnvelope):
            logger.warning(
                f"rpc error from {method}: code={envelope.code} message={envelope.message}"
            )
            raise RPCError(
                envelope.message,
                rpc_code=envelope.code,
                dialect=envelope.dialect,
                data=envelope.data,
                name=envelope.name,
                detail=envelope.detail,
            )
        return envelope.result

"""Base class for one-class-per-remote-module service wrappers."""

from __future__ import annotations

from typing import Any

from kbaserpc.comm.client import DEFAULT_TIMEOUT, JSONRPCClient
from kbaserpc.comm.errors import EnvelopeCondition, EnvelopeValidationError
from kbaserpc.comm.protocol import Dialect
from kbaserpc.comm.transport import HttpInvoker


class ServiceClient:
    """Binds a JSON-RPC endpoint to a module namespace.

    Subclasses set ``module`` (and ``dialect`` when the service does not speak
    JSON-RPC 2.0) and expose typed wrappers over ``call_func``.
    """

    module: str = ""
    dialect: Dialect = Dialect.V20

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        authorization: str | None = None,
        *,
        invoker: HttpInvoker | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self.authorization = authorization
        self.invoker = invoker

    def _rpc_client(self) -> JSONRPCClient:
        return JSONRPCClient(
            self.url,
            dialect=self.dialect,
            timeout=self.timeout,
            authorization=self.authorization,
            invoker=self.invoker,
        )

    async def call_func(self, func_name: str, params: Any = None) -> Any:
        if not self.module:
            raise ValueError(f"{type(self).__name__} does not define a module name")
        method = f"{self.module}.{func_name}"
        return await self._rpc_client().call(method, params, timeout=self.timeout)

    def _unwrap_single(self, result: Any, func_name: str) -> Any:
        """Return element 0 of an array-wrapped ("1.1" style) result."""
        if not isinstance(result, list) or not result:
            raise EnvelopeValidationError(
                f"{self.module}.{func_name} returned {type(result).__name__}, expected a non-empty array",
                condition=EnvelopeCondition.RESULT_NOT_WRAPPED,
                dialect=self.dialect,
            )
        return result[0]

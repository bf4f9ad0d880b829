"""HTTP POST invoker for JSON-RPC envelopes."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from kbaserpc.comm.errors import TransportError


@dataclass(slots=True)
class HttpResponse:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpInvoker:
    """Performs one POST per call and hands back the raw body text."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def post(self, url: str, body: str, *, headers: dict[str, str], timeout: float) -> HttpResponse:
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                resp = await client.post(url, content=body.encode("utf-8"), headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"rpc timeout after {timeout}s: POST {url}",
                url=url,
                code="TRANSPORT_TIMEOUT",
                retryable=True,
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"rpc network error: POST {url}: {exc}",
                url=url,
                code="TRANSPORT_NETWORK_ERROR",
                retryable=True,
            ) from exc
        return HttpResponse(status_code=int(resp.status_code), text=resp.text)

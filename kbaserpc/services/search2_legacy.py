"""Legacy search API client.

The service speaks JSON-RPC 2.0 on the wire but keeps 1.1-style array
wrapping: params go out as a one-element list and the result comes back as
one. Unwrapping happens here, not in the codec.
"""

from __future__ import annotations

from typing import Any

from kbaserpc.comm.service_client import ServiceClient


class Search2LegacyClient(ServiceClient):
    module = "KBaseSearchEngine"

    async def search_objects(self, params: dict[str, Any]) -> dict[str, Any]:
        """Full-text object search; returns objects, pagination and totals."""
        result = await self.call_func("search_objects", [params])
        return self._unwrap_single(result, "search_objects")

    async def search_types(self, params: dict[str, Any]) -> dict[str, Any]:
        """Per-type hit counts (``type_to_count``) for a search."""
        result = await self.call_func("search_types", [params])
        return self._unwrap_single(result, "search_types")

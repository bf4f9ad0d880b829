"""Smoke tests against the KBase CI environment (KBASERPC_LIVE=1)."""

import pytest

from kbaserpc.comm.cache import CacheSettings, ResolutionCache
from kbaserpc.comm.dynamic_service_client import DynamicServiceClient
from kbaserpc.config.access import get_config
from kbaserpc.services import Search2LegacyClient

pytestmark = pytest.mark.requires_network


@pytest.mark.asyncio
async def test_search_types_counts_public_data() -> None:
    config = get_config()
    client = Search2LegacyClient(config.search.url, config.rpc.timeout, config.authorization)
    result = await client.search_types(
        {"match_filter": {"full_text_in_all": "coli"}, "access_filter": {"with_public": 1}}
    )
    assert "type_to_count" in result


@pytest.mark.asyncio
async def test_dynamic_lookup_resolves_a_url() -> None:
    config = get_config()
    client = DynamicServiceClient(
        config.service_discovery.url,
        config.rpc.timeout,
        config.authorization,
        module="HTMLFileSetServ",
        cache=ResolutionCache(CacheSettings.from_config(config.cache)),
    )
    try:
        status = await client.lookup_module()
    finally:
        await client.cache.close()
    assert status.url.startswith("http")
    assert client.url == status.url

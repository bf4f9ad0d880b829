"""Service client whose URL is looked up through the discovery service."""

from __future__ import annotations

from typing import Any

from loguru import logger

from kbaserpc.comm.cache import CacheSettings, ResolutionCache
from kbaserpc.comm.client import DEFAULT_TIMEOUT
from kbaserpc.comm.service_client import ServiceClient
from kbaserpc.comm.transport import HttpInvoker
from kbaserpc.config.access import get_config, watch_section
from kbaserpc.config.schema import CacheConfig
from kbaserpc.services.service_wizard import ServiceStatus, ServiceWizardClient

_module_cache: ResolutionCache[ServiceStatus] | None = None


def _apply_cache_config(cache_config: CacheConfig) -> None:
    # Entries stay; the new lifetime and timeouts apply from the next lookup on.
    if _module_cache is not None:
        _module_cache.settings = CacheSettings.from_config(cache_config)
        logger.info(f"module cache settings reloaded: {_module_cache.settings}")


watch_section("cache", _apply_cache_config)


def get_module_cache() -> ResolutionCache[ServiceStatus]:
    """Process-wide module cache, configured from ``Config.cache`` and kept in step with reloads."""
    global _module_cache
    config = get_config()
    if _module_cache is None:
        _module_cache = ResolutionCache(CacheSettings.from_config(config.cache))
    return _module_cache


async def reset_module_cache() -> None:
    """Tear down the process-wide module cache."""
    global _module_cache
    cache, _module_cache = _module_cache, None
    if cache is not None:
        await cache.close()


class DynamicServiceClient(ServiceClient):
    """
    Resolve ``module`` (at ``version``) to its current URL before every call.

    ``url`` is the discovery service URL. Lookups go through a ResolutionCache,
    so a service that moves is picked up once its entry expires, without
    rebuilding the client.
    """

    service_discovery_module: str = "ServiceWizard"

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        authorization: str | None = None,
        *,
        version: str | None = None,
        module: str | None = None,
        cache: ResolutionCache[ServiceStatus] | None = None,
        invoker: HttpInvoker | None = None,
    ):
        super().__init__(url, timeout, authorization, invoker=invoker)
        if module:
            self.module = module
        if not self.module:
            raise ValueError(f"{type(self).__name__} requires a module name")
        self.logical_module = self.module
        self.version = None if version in (None, "", "auto") else version
        self.service_discovery_url = url
        self._cache = cache

    @property
    def cache(self) -> ResolutionCache[ServiceStatus]:
        return self._cache if self._cache is not None else get_module_cache()

    def module_id(self) -> str:
        return f"{self.logical_module}:{self.version or 'auto'}"

    async def _fetch_status(self) -> ServiceStatus:
        client = ServiceWizardClient(
            self.service_discovery_url,
            self.timeout,
            self.authorization,
            invoker=self.invoker,
        )
        client.module = self.service_discovery_module
        logger.debug(f"looking up {self.module_id()} via {self.service_discovery_url}")
        return await client.get_service_status(self.logical_module, self.version)

    async def lookup_module(self) -> ServiceStatus:
        status = await self.cache.get_item_with_wait(self.module_id(), self._fetch_status)
        self.module = status.module_name
        self.url = status.url
        return status

    async def call_func(self, func_name: str, params: Any = None) -> Any:
        await self.lookup_module()
        return await super().call_func(func_name, params)

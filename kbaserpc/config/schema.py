"""Configuration schema using Pydantic.

Single data model and defaults for kbaserpc, persisted to ~/.kbaserpc/config.json.
"""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RpcConfig(BaseModel):
    """JSON-RPC call defaults."""
    timeout: float = 10.0  # seconds per HTTP call
    token: str = ""  # sent verbatim as the Authorization header
    dialect: Literal["1.1", "2.0"] = "2.0"


class ServiceDiscoveryConfig(BaseModel):
    """Discovery service used by dynamic service clients."""
    url: str = "https://ci.kbase.us/services/service_wizard"
    module: str = "ServiceWizard"


class CacheConfig(BaseModel):
    """Module resolution cache tunables, in seconds."""
    item_lifetime: float = 1800.0
    monitoring_frequency: float = 60.0
    waiter_timeout: float = 30.0
    waiter_frequency: float = 0.1  # accepted for old config files; waiters are woken by the fetch, not by polling


class SearchConfig(BaseModel):
    """Legacy search API endpoint."""
    url: str = "https://ci.kbase.us/services/searchapi2/legacy"


class Config(BaseSettings):
    """Root configuration for kbaserpc."""
    rpc: RpcConfig = Field(default_factory=RpcConfig)
    service_discovery: ServiceDiscoveryConfig = Field(default_factory=ServiceDiscoveryConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)

    @property
    def authorization(self) -> str | None:
        token = self.rpc.token.strip()
        return token or None

    model_config = SettingsConfigDict(
        env_prefix="KBASERPC_",
        env_nested_delimiter="__",
    )

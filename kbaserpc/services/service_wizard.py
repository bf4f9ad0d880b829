"""Client for the service discovery ("service wizard") module."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kbaserpc.comm.protocol import Dialect
from kbaserpc.comm.service_client import ServiceClient


class ServiceStatus(BaseModel):
    """Where a dynamic service currently runs."""

    model_config = ConfigDict(extra="allow")

    module_name: str
    url: str
    version: str | None = None
    git_commit_hash: str | None = None
    release_tags: list[str] = Field(default_factory=list)
    hash: str | None = None
    up: int | None = None
    status: str | None = None
    health: str | None = None


class ServiceWizardClient(ServiceClient):
    module = "ServiceWizard"
    dialect = Dialect.V11

    async def get_service_status(self, module_name: str, version: str | None = None) -> ServiceStatus:
        params: dict[str, Any] = {"module_name": module_name, "version": version}
        result = await self.call_func("get_service_status", [params])
        return ServiceStatus.model_validate(self._unwrap_single(result, "get_service_status"))

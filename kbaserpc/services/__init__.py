"""Concrete service clients."""

from kbaserpc.services.search2_legacy import Search2LegacyClient
from kbaserpc.services.service_wizard import ServiceStatus, ServiceWizardClient

__all__ = ["Search2LegacyClient", "ServiceStatus", "ServiceWizardClient"]

"""Declarative reconciliation of NiFi flows through the NiFi REST API."""

from nifi_provider.config import ProviderConfig
from nifi_provider.provider import Provider

__version__ = "0.3.0"

__all__ = ["Provider", "ProviderConfig", "__version__"]

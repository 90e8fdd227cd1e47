"""Provider wiring: configuration, transport, repository, lifecycle and reconcilers."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from nifi_provider.client import NiFiClient
from nifi_provider.config import ProviderConfig
from nifi_provider.errors import ConfigurationError, NiFiError, ReconcileError
from nifi_provider.lifecycle import LifecycleController
from nifi_provider.resources import RESOURCE_TYPES, Resource
from nifi_provider.schema import ResourceData
from nifi_provider.transport import Transport

logger = logging.getLogger(__name__)


class Provider:
    """Entry point for reconciling declared resources against one NiFi instance.

    Args:
        config: Connection settings.
        transport: Anything with a ``call(method, path, body=None)`` method;
            a :class:`Transport` built from ``config`` by default.
        sleep: Sleep function used by polling loops, injectable for tests.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.transport = transport if transport is not None else Transport(config)
        self.client = NiFiClient(self.transport)
        self.lifecycle = LifecycleController(self.client, config.poll_interval, sleep)
        self.resources: dict[str, Resource] = {
            cls.type_name: cls(self.client, self.lifecycle) for cls in RESOURCE_TYPES
        }

    @classmethod
    def from_env(cls, **overrides: object) -> Provider:
        return cls(ProviderConfig.from_env(**overrides))

    def resource(self, type_name: str) -> Resource:
        try:
            return self.resources[type_name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown resource type {type_name!r} (valid: {', '.join(sorted(self.resources))})"
            ) from None

    def root_process_group(self) -> dict[str, str]:
        """Data source exposing the id and name of the root process group."""
        try:
            group = self.client.root_process_group()
        except NiFiError as exc:
            raise ReconcileError("process group", "root", "read", str(exc)) from exc
        return {"id": group.id, "name": group.component.name}

    def apply(self, d: ResourceData) -> None:
        """Create ``d`` if it does not exist remotely, update it otherwise."""
        resource = self.resource(d.type)
        if resource.exists(d):
            resource.update(d)
        else:
            resource.create(d)

    def destroy(self, d: ResourceData) -> None:
        resource = self.resource(d.type)
        if not d.id:
            logger.debug("%s has no tracked id, nothing to delete", d.type)
            return
        resource.delete(d)

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

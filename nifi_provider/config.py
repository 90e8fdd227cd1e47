"""Centralized provider configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from nifi_provider.errors import ConfigurationError


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for a NiFi instance.

    Values come from environment variables with defaults suited to a local
    unsecured NiFi. Client-certificate authentication is enabled only when
    both ``admin_cert`` and ``admin_key`` are set.
    """

    host: str
    api_path: str = "nifi-api"
    admin_cert: str | None = None
    admin_key: str | None = None
    request_timeout: float = 30.0
    poll_interval: float = 3.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigurationError("NiFi host is required (set NIFI_HOST or --host)")

    @classmethod
    def from_env(cls, **overrides: object) -> ProviderConfig:
        """Build configuration from environment variables.

        Keyword overrides that are not ``None`` take precedence over the
        environment, which lets the CLI layer its flags on top.
        """
        values: dict[str, object] = {
            "host": os.environ.get("NIFI_HOST", ""),
            "api_path": os.environ.get("NIFI_API_PATH", "nifi-api"),
            "admin_cert": os.environ.get("NIFI_ADMIN_CERT") or None,
            "admin_key": os.environ.get("NIFI_ADMIN_KEY") or None,
            "request_timeout": float(os.environ.get("NIFI_REQUEST_TIMEOUT", "30")),
            "poll_interval": float(os.environ.get("NIFI_POLL_INTERVAL", "3")),
            "log_level": os.environ.get("LOG_LEVEL", "INFO"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]

    @property
    def uses_client_cert(self) -> bool:
        return bool(self.admin_cert and self.admin_key)

    @property
    def scheme(self) -> str:
        return "https" if self.uses_client_cert else "http"

    @property
    def base_url(self) -> str:
        """API root, e.g. ``https://nifi:9443/nifi-api``."""
        return f"{self.scheme}://{self.host}/{self.api_path.strip('/')}"

    def configure_logging(self) -> None:
        """Set up logging based on the configured level."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

"""JSON-over-HTTP transport for the NiFi REST API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import requests
import urllib3
from requests.exceptions import RequestException

from nifi_provider.config import ProviderConfig
from nifi_provider.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Thin wrapper around a ``requests.Session`` rooted at the NiFi API path.

    Paths passed to :meth:`call` are relative to the API root
    (``/processors/{id}``). Bodies are serialized as JSON and the
    ``Content-Type`` header is only sent when there is a body.

    Attributes:
        base_url: API root, e.g. ``https://nifi:9443/nifi-api``.
        session: The configured ``requests.Session``.
    """

    def __init__(self, config: ProviderConfig, session: requests.Session | None = None) -> None:
        self.base_url = config.base_url
        self._timeout = config.request_timeout

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        if config.uses_client_cert:
            for label, path in (("certificate", config.admin_cert), ("key", config.admin_key)):
                if not Path(str(path)).is_file():
                    raise ConfigurationError(f"Client {label} not found: {path}")
            self.session.cert = (str(config.admin_cert), str(config.admin_key))
            # NiFi installs commonly present self-signed server certificates
            self.session.verify = False
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            logger.info("Using client certificate authentication against %s", self.base_url)

    def call(self, method: str, path: str, body: Any = None) -> tuple[int, Any]:
        """Execute a request and decode the JSON response.

        Args:
            method: HTTP verb.
            path: Path relative to the API root, including any query string.
            body: JSON-serializable request body, or ``None``.

        Returns:
            Tuple of (status code, decoded JSON payload or ``None``).

        Raises:
            TransportError: On network failure, undecodable JSON, or any
                status of 300 and above.
        """
        url = f"{self.base_url}{path}"
        kwargs: dict[str, Any] = {"timeout": self._timeout}
        if body is not None:
            kwargs["json"] = body
            kwargs["headers"] = {"Content-Type": "application/json; charset=utf-8"}

        try:
            resp = self.session.request(method, url, **kwargs)
        except RequestException as exc:
            logger.warning("%s %s unreachable: %s", method, url, exc)
            raise TransportError(method, path, 0, str(exc)) from exc

        logger.debug("%s %s -> HTTP %d", method, path, resp.status_code)

        if resp.status_code >= 300:
            raise TransportError(method, path, resp.status_code, resp.text[:300])

        if not resp.content:
            return resp.status_code, None
        try:
            return resp.status_code, resp.json()
        except ValueError as exc:
            raise TransportError(method, path, resp.status_code, "invalid JSON response") from exc

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

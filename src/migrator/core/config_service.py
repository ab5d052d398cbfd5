"""Config service client — resolve a database name to a connection string.

The config service answers ``GET {base_url}/dbconnection/{db}`` with the
six-field connection string as a plain-text body.
"""

from __future__ import annotations

import httpx

from migrator.core.errors import ConfigServiceError
from migrator.core.logging import get_logger

logger = get_logger(__name__)


class ConfigServiceClient:
    """Thin synchronous client for the config service.

    ``transport`` exists for tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = "http://config/config-service",
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def get_connection_string(self, db_name: str) -> str:
        """Fetch the connection string for ``db_name``.

        Raises:
            ConfigServiceError: transport failure or non-200 response
        """
        url = f"{self._base_url}/dbconnection/{db_name}"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            raise ConfigServiceError(
                f"Failed to reach config service for {db_name}", cause=exc
            ).with_context(database=db_name) from exc

        if response.status_code != 200:
            raise ConfigServiceError(
                f"{response.status_code} {response.text}",
                status_code=response.status_code,
            ).with_context(database=db_name)

        logger.debug("config_service.resolved", db=db_name)
        return response.text


__all__ = ["ConfigServiceClient"]

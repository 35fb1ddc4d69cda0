from __future__ import annotations

import asyncio
import logging

import httpx

from colloquy.app.observability.telemetry import DISPATCH_REFUSED, emit_operation_event
from colloquy.app.transport.connector import RestConnector
from colloquy.core.config import ClientConfig

LOGGER = logging.getLogger(__name__)


class ConnectorRegistry:
    """Resolves a service id plus base path into a ``RestConnector``.

    Connectors are cached per ``(service_id, base_path)`` so repeated
    operations share one ``httpx.AsyncClient``. Services without credentials
    in the ``ClientConfig`` resolve to ``None``.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._connectors: dict[tuple[str, str], RestConnector] = {}

    def resolve(self, service_id: str, base_path: str) -> RestConnector | None:
        key = (service_id, base_path)
        cached = self._connectors.get(key)
        if cached is not None:
            return cached

        credentials = self._config.find_credentials(service_id)
        if credentials is None:
            emit_operation_event(
                DISPATCH_REFUSED,
                logger=LOGGER,
                service_id=service_id,
                base_path=base_path,
                reason="no_credentials",
            )
            return None

        auth = None
        if credentials.has_basic_auth:
            auth = httpx.BasicAuth(credentials.username or "", credentials.password or "")
        connector = RestConnector(
            f"{credentials.url.rstrip('/')}{base_path}",
            auth=auth,
            timeout_s=self._config.http_timeout_s,
            headers={"User-Agent": self._config.user_agent},
            transport=self._transport,
        )
        self._connectors[key] = connector
        return connector

    async def aclose(self) -> None:
        connectors = list(self._connectors.values())
        self._connectors.clear()
        await asyncio.gather(*(connector.aclose() for connector in connectors))

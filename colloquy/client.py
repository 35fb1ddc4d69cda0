from __future__ import annotations

import httpx

from colloquy.app.dialogs.files import LoadFile
from colloquy.app.dialogs.service import DialogService
from colloquy.app.transport.registry import ConnectorRegistry
from colloquy.core.config import ClientConfig, load_client_config


def create_dialog_service(
    config: ClientConfig | None = None,
    *,
    load_file: LoadFile | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[DialogService, ConnectorRegistry]:
    registry = ConnectorRegistry(config or load_client_config(), transport=transport)
    return DialogService(registry, load_file=load_file), registry

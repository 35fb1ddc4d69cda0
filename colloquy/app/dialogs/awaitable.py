from __future__ import annotations

import asyncio
from typing import Callable, Optional, TypeVar

from colloquy.app.dialogs.contracts import (
    ConversationTurnResult,
    DialogListResult,
    UploadResult,
)
from colloquy.app.dialogs.service import DialogService

T = TypeVar("T")


def _resolve_into(future: asyncio.Future[Optional[T]]) -> Callable[[Optional[T]], None]:
    def _on_complete(result: Optional[T]) -> None:
        if not future.done():
            future.set_result(result)

    return _on_complete


async def list_dialogs(service: DialogService) -> DialogListResult | None:
    future: asyncio.Future[DialogListResult | None] = (
        asyncio.get_running_loop().create_future()
    )
    if not service.list_dialogs(_resolve_into(future)):
        return None
    return await future


async def upload_dialog(
    service: DialogService,
    name: str,
    dialog_file: str | None = None,
) -> UploadResult | None:
    future: asyncio.Future[UploadResult | None] = (
        asyncio.get_running_loop().create_future()
    )
    if not service.upload_dialog(name, _resolve_into(future), dialog_file):
        return None
    return await future


async def converse(
    service: DialogService,
    dialog_id: str,
    input_text: str,
    *,
    conversation_id: int = 0,
    client_id: int = 0,
) -> ConversationTurnResult | None:
    future: asyncio.Future[ConversationTurnResult | None] = (
        asyncio.get_running_loop().create_future()
    )
    dispatched = service.converse(
        dialog_id,
        input_text,
        _resolve_into(future),
        conversation_id=conversation_id,
        client_id=client_id,
    )
    if not dispatched:
        return None
    return await future

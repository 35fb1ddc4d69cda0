from __future__ import annotations

import logging
from typing import Callable, TypeVar

from pydantic import BaseModel

from colloquy.app.dialogs.contracts import (
    ConversationTurnResult,
    Decoded,
    DecodeFailure,
    DecodeOutcome,
    DialogListResult,
    DialogSummary,
    UploadResult,
)
from colloquy.app.observability.telemetry import (
    DECODE_FAILED,
    TRANSPORT_FAILED,
    emit_operation_event,
)
from colloquy.app.transport.contracts import RestResponse

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

TRANSPORT_FAILURE_REASON = "transport_failure"


class _DialogEntryPayload(BaseModel):
    dialog_id: str
    name: str


class _DialogsPayload(BaseModel):
    dialogs: list[_DialogEntryPayload]


class _UploadPayload(BaseModel):
    id: str


class _ConversationPayload(BaseModel):
    response: list[str]
    input: str
    conversation_id: int
    confidence: float
    client_id: int


def decode_dialog_list(data: bytes) -> DialogListResult:
    payload = _DialogsPayload.model_validate_json(data)
    return DialogListResult(
        dialogs=tuple(
            DialogSummary(dialog_id=entry.dialog_id, name=entry.name)
            for entry in payload.dialogs
        )
    )


def decode_upload(data: bytes) -> UploadResult:
    payload = _UploadPayload.model_validate_json(data)
    return UploadResult(dialog_id=payload.id)


def decode_conversation(data: bytes) -> ConversationTurnResult:
    payload = _ConversationPayload.model_validate_json(data)
    return ConversationTurnResult(
        utterances=tuple(payload.response),
        input_echo=payload.input,
        conversation_id=payload.conversation_id,
        confidence=payload.confidence,
        client_id=payload.client_id,
    )


def decode_response(
    response: RestResponse,
    decoder: Callable[[bytes], T],
    *,
    tag: str,
) -> DecodeOutcome[T]:
    """Turn a transport response into ``Decoded`` or ``DecodeFailure``.

    A failed transport never reaches the decoder. Every error raised while
    decoding is logged under ``tag`` and returned as ``DecodeFailure``;
    malformed JSON, a wrong shape and a coercion error are not told apart.
    """
    if not response.success:
        emit_operation_event(
            TRANSPORT_FAILED,
            level=logging.WARNING,
            logger=LOGGER,
            tag=tag,
            status_code=response.status_code,
            error=response.error,
        )
        return DecodeFailure(reason=TRANSPORT_FAILURE_REASON)

    try:
        value = decoder(response.data)
    except Exception as exc:
        emit_operation_event(
            DECODE_FAILED,
            logger=LOGGER,
            tag=tag,
            reason=exc.__class__.__name__,
            error=exc,
        )
        return DecodeFailure(reason=exc.__class__.__name__)
    return Decoded(value=value)

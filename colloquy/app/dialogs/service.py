from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar
from urllib.parse import quote

from colloquy.app.dialogs.contracts import (
    Decoded,
    OnConverse,
    OnDialogs,
    OnUpload,
    OperationState,
)
from colloquy.app.dialogs.decoding import (
    decode_conversation,
    decode_dialog_list,
    decode_response,
    decode_upload,
)
from colloquy.app.dialogs.files import LoadFile, dialog_file_name, read_dialog_file
from colloquy.app.observability.telemetry import (
    DISPATCH_REFUSED,
    DUPLICATE_RESPONSE,
    FILE_LOAD_FAILED,
    emit_operation_event,
)
from colloquy.app.transport.contracts import (
    ConnectorResolver,
    Form,
    RestRequest,
    RestResponse,
)
from colloquy.core.config import DIALOG_SERVICE_ID

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DIALOGS_BASE_PATH = "/v1/dialogs"

TAG_LIST_DIALOGS = "list_dialogs"
TAG_UPLOAD_DIALOG = "upload_dialog"
TAG_CONVERSE = "converse"


class InvalidArgumentError(ValueError):
    pass


@dataclass
class _Operation(Generic[T]):
    tag: str
    decoder: Callable[[bytes], T]
    on_complete: Callable[[Optional[T]], None]
    state: OperationState = OperationState.CREATED

    def handle_response(self, request: RestRequest, response: RestResponse) -> None:
        if self.state in {OperationState.DECODING, OperationState.COMPLETED}:
            emit_operation_event(
                DUPLICATE_RESPONSE,
                level=logging.WARNING,
                logger=LOGGER,
                tag=self.tag,
                function=request.function,
            )
            return

        self.state = OperationState.DECODING
        outcome = decode_response(response, self.decoder, tag=self.tag)
        self.state = OperationState.COMPLETED
        self.on_complete(outcome.value if isinstance(outcome, Decoded) else None)


def _require_callback(value: Any, name: str) -> None:
    if value is None or not callable(value):
        raise InvalidArgumentError(f"{name} is required")


def _require_text(value: Any, name: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{name} must be a non-empty string")


def _require_int(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer")


class DialogService:
    """Lists, uploads and converses with dialogs on the remote service.

    Every operation returns ``True`` once its request has been handed to the
    connector and ``False`` when nothing was dispatched. Accepted requests
    end with exactly one call of ``on_complete``, carrying the decoded result
    or ``None`` when the operation failed. Missing callbacks and empty
    required strings raise ``InvalidArgumentError`` before anything else.
    """

    def __init__(
        self,
        resolver: ConnectorResolver,
        *,
        load_file: LoadFile | None = None,
        service_id: str = DIALOG_SERVICE_ID,
    ) -> None:
        self._resolver = resolver
        self._service_id = service_id
        self.load_file: LoadFile | None = load_file

    def list_dialogs(self, on_complete: OnDialogs) -> bool:
        _require_callback(on_complete, "on_complete")
        operation = _Operation(TAG_LIST_DIALOGS, decode_dialog_list, on_complete)
        return self._dispatch(operation, function="")

    def upload_dialog(
        self,
        name: str,
        on_complete: OnUpload,
        dialog_file: str | None = None,
    ) -> bool:
        _require_text(name, "name")
        _require_callback(on_complete, "on_complete")
        operation = _Operation(TAG_UPLOAD_DIALOG, decode_upload, on_complete)

        forms: dict[str, Form] = {"name": Form.text(name)}
        if dialog_file is not None:
            dialog_data = self._load_dialog_file(dialog_file)
            if not dialog_data:
                emit_operation_event(
                    FILE_LOAD_FAILED,
                    logger=LOGGER,
                    tag=operation.tag,
                    path=dialog_file,
                )
                operation.state = OperationState.FAILED
                return False
            forms["file"] = Form.file(dialog_data, dialog_file_name(dialog_file))

        return self._dispatch(operation, function="", forms=forms)

    def converse(
        self,
        dialog_id: str,
        input_text: str,
        on_complete: OnConverse,
        conversation_id: int = 0,
        client_id: int = 0,
    ) -> bool:
        _require_text(dialog_id, "dialog_id")
        _require_text(input_text, "input_text")
        _require_callback(on_complete, "on_complete")
        _require_int(conversation_id, "conversation_id")
        _require_int(client_id, "client_id")
        operation = _Operation(TAG_CONVERSE, decode_conversation, on_complete)

        # Zero means a new conversation or no client id; the service must not see it.
        forms: dict[str, Form] = {"input": Form.text(input_text)}
        if conversation_id != 0:
            forms["conversation_id"] = Form.text(conversation_id)
        if client_id != 0:
            forms["client_id"] = Form.text(client_id)

        return self._dispatch(
            operation, function=f"/{quote(dialog_id, safe='')}/conversation", forms=forms
        )

    def _load_dialog_file(self, dialog_file: str) -> bytes | None:
        loader = self.load_file or read_dialog_file
        return loader(dialog_file)

    def _dispatch(
        self,
        operation: _Operation[Any],
        *,
        function: str,
        forms: dict[str, Form] | None = None,
    ) -> bool:
        operation.state = OperationState.VALIDATED
        connector = self._resolver.resolve(self._service_id, DIALOGS_BASE_PATH)
        if connector is None:
            emit_operation_event(
                DISPATCH_REFUSED,
                logger=LOGGER,
                tag=operation.tag,
                reason="no_connector",
                service_id=self._service_id,
            )
            operation.state = OperationState.FAILED
            return False

        request = RestRequest(
            on_response=operation.handle_response,
            function=function,
            forms=forms,
        )
        operation.state = OperationState.DISPATCHED
        if connector.send(request):
            return True
        if operation.state is OperationState.DISPATCHED:
            operation.state = OperationState.FAILED
        emit_operation_event(
            DISPATCH_REFUSED,
            logger=LOGGER,
            tag=operation.tag,
            reason="connector_refused",
            service_id=self._service_id,
        )
        return False

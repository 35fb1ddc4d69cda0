from __future__ import annotations

import json
import logging
from typing import Any

DECODE_FAILED = "dialog_decode_failed"
TRANSPORT_FAILED = "dialog_transport_failed"
FILE_LOAD_FAILED = "dialog_file_load_failed"
DISPATCH_REFUSED = "dialog_dispatch_refused"
DUPLICATE_RESPONSE = "dialog_duplicate_response"
HANDLER_FAILED = "dialog_handler_failed"


def emit_operation_event(
    event: str,
    *,
    level: int = logging.ERROR,
    logger: logging.Logger | None = None,
    **fields: Any,
) -> None:
    active_logger = logger or logging.getLogger(__name__)
    payload = {key: _json_safe(value) for key, value in fields.items()}
    active_logger.log(level, "%s %s", event, json.dumps(payload, sort_keys=True))


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseException):
        return f"{value.__class__.__name__}: {value}"
    return str(value)

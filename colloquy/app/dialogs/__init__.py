from .contracts import (
    ConversationTurnResult,
    DialogListResult,
    DialogSummary,
    OperationState,
    UploadResult,
)
from .service import DialogService, InvalidArgumentError

__all__ = [
    "ConversationTurnResult",
    "DialogListResult",
    "DialogService",
    "DialogSummary",
    "InvalidArgumentError",
    "OperationState",
    "UploadResult",
]

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterator, Optional, TypeVar, Union

T = TypeVar("T")


class OperationState(str, Enum):
    CREATED = "created"
    VALIDATED = "validated"
    DISPATCHED = "dispatched"
    DECODING = "decoding"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DialogSummary:
    dialog_id: str
    name: str


@dataclass(frozen=True)
class DialogListResult:
    dialogs: tuple[DialogSummary, ...] = tuple()

    def __iter__(self) -> Iterator[DialogSummary]:
        return iter(self.dialogs)

    def __len__(self) -> int:
        return len(self.dialogs)


@dataclass(frozen=True)
class UploadResult:
    dialog_id: str


@dataclass(frozen=True)
class ConversationTurnResult:
    utterances: tuple[str, ...]
    input_echo: str
    conversation_id: int
    confidence: float
    client_id: int


@dataclass(frozen=True)
class Decoded(Generic[T]):
    value: T


@dataclass(frozen=True)
class DecodeFailure:
    reason: str


DecodeOutcome = Union[Decoded[T], DecodeFailure]

OnDialogs = Callable[[Optional[DialogListResult]], None]
OnUpload = Callable[[Optional[UploadResult]], None]
OnConverse = Callable[[Optional[ConversationTurnResult]], None]

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Protocol


@dataclass(frozen=True)
class Form:
    """One form field: text for plain values, bytes plus filename for files."""

    value: str | None = None
    content: bytes | None = None
    filename: str | None = None

    @classmethod
    def text(cls, value: str | int) -> Form:
        return cls(value=str(value))

    @classmethod
    def file(cls, content: bytes, filename: str) -> Form:
        return cls(content=content, filename=filename)

    @property
    def is_file(self) -> bool:
        return self.content is not None


@dataclass(frozen=True)
class RestResponse:
    success: bool
    data: bytes = b""
    status_code: int | None = None
    error: str | None = None


ResponseHandler = Callable[["RestRequest", RestResponse], None]


@dataclass(frozen=True)
class RestRequest:
    on_response: ResponseHandler
    function: str = ""
    forms: Mapping[str, Form] | None = None

    @property
    def method(self) -> str:
        return "POST" if self.forms else "GET"


class Connector(Protocol):
    def send(self, request: RestRequest) -> bool: ...


class ConnectorResolver(Protocol):
    def resolve(self, service_id: str, base_path: str) -> Connector | None: ...

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from colloquy.app.transport.contracts import RestRequest, RestResponse
from colloquy.core.config import DIALOG_SERVICE_ID, ClientConfig, ServiceCredentials


@dataclass
class RecordingConnector:
    """In-memory connector; replies immediately when ``reply`` is set."""

    reply: RestResponse | None = None
    accept: bool = True
    requests: list[RestRequest] = field(default_factory=list)

    def send(self, request: RestRequest) -> bool:
        if not self.accept:
            return False
        self.requests.append(request)
        if self.reply is not None:
            request.on_response(request, self.reply)
        return True

    def respond(self, response: RestResponse, index: int = -1) -> None:
        request = self.requests[index]
        request.on_response(request, response)


@dataclass
class RecordingResolver:
    connector: RecordingConnector | None
    lookups: list[tuple[str, str]] = field(default_factory=list)

    def resolve(self, service_id: str, base_path: str) -> RecordingConnector | None:
        self.lookups.append((service_id, base_path))
        return self.connector


@dataclass
class CompletionRecorder:
    calls: list[Any] = field(default_factory=list)

    def __call__(self, result: Any) -> None:
        self.calls.append(result)


@pytest.fixture
def connector() -> RecordingConnector:
    return RecordingConnector()


@pytest.fixture
def resolver(connector: RecordingConnector) -> RecordingResolver:
    return RecordingResolver(connector=connector)


@pytest.fixture
def unconfigured_resolver() -> RecordingResolver:
    return RecordingResolver(connector=None)


@pytest.fixture
def completions() -> CompletionRecorder:
    return CompletionRecorder()


@pytest.fixture(autouse=True)
def clear_dialog_env(
    request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch
) -> None:
    if request.node.get_closest_marker("integration") is not None:
        return
    for name in (
        "DIALOG_SERVICE_URL",
        "DIALOG_SERVICE_USERNAME",
        "DIALOG_SERVICE_PASSWORD",
        "DIALOG_HTTP_TIMEOUT_S",
        "DIALOG_HTTP_USER_AGENT",
        "COLLOQUY_CREDENTIALS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        credentials=(
            ServiceCredentials(
                service_id=DIALOG_SERVICE_ID,
                url="http://dialog.test/api",
                username="svc-user",
                password="svc-pass",
            ),
        ),
        http_timeout_s=5.0,
        user_agent="colloquy-tests",
    )


def build_dialog_service_app() -> FastAPI:
    app = FastAPI(title="Dialog service stand-in")
    dialogs: dict[str, dict[str, Any]] = {
        "d1": {"dialog_id": "d1", "name": "Greeting", "content": b""},
    }
    dialog_ids = count(2)
    conversation_ids = count(100)

    @app.get("/api/v1/dialogs")
    async def list_dialogs() -> dict[str, Any]:
        return {
            "dialogs": [
                {"dialog_id": entry["dialog_id"], "name": entry["name"]}
                for entry in dialogs.values()
            ]
        }

    @app.post("/api/v1/dialogs", status_code=201)
    async def create_dialog(
        name: str = Form(...),
        file: UploadFile | None = File(None),
    ) -> dict[str, str]:
        if any(entry["name"] == name for entry in dialogs.values()):
            raise HTTPException(status_code=409, detail="dialog exists")
        dialog_id = f"d{next(dialog_ids)}"
        content = await file.read() if file is not None else b""
        dialogs[dialog_id] = {"dialog_id": dialog_id, "name": name, "content": content}
        return {"id": dialog_id}

    @app.post("/api/v1/dialogs/{dialog_id}/conversation")
    async def converse(
        dialog_id: str,
        input: str = Form(...),
        conversation_id: int | None = Form(None),
        client_id: int | None = Form(None),
    ) -> dict[str, Any]:
        if dialog_id not in dialogs:
            raise HTTPException(status_code=404, detail="unknown dialog")
        return {
            "response": [f"{dialogs[dialog_id]['name']}: {input}"],
            "input": input,
            "conversation_id": conversation_id or next(conversation_ids),
            "confidence": 0.9,
            "client_id": client_id or 7,
        }

    return app


@pytest.fixture
def dialog_service_app() -> FastAPI:
    return build_dialog_service_app()

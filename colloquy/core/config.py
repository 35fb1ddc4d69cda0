from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

DIALOG_SERVICE_ID = "DialogV1"
DEFAULT_HTTP_TIMEOUT_S = 30.0
DEFAULT_USER_AGENT = "colloquy/0.1.0"


class ConfigurationError(Exception):
    pass


@dataclass(frozen=True)
class ServiceCredentials:
    service_id: str
    url: str
    username: str | None = None
    password: str | None = None

    @property
    def has_basic_auth(self) -> bool:
        return bool(self.username) and self.password is not None


@dataclass(frozen=True)
class ClientConfig:
    credentials: tuple[ServiceCredentials, ...]
    http_timeout_s: float
    user_agent: str

    def find_credentials(self, service_id: str) -> ServiceCredentials | None:
        for entry in self.credentials:
            if entry.service_id == service_id:
                return entry
        return None


class _CredentialsEntry(BaseModel):
    service_id: str = Field(min_length=1)
    url: str = Field(min_length=1)
    user: str | None = None
    password: str | None = None


class _CredentialsFile(BaseModel):
    credentials: list[_CredentialsEntry] = Field(default_factory=list)


def _read_optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if not value:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _read_float_env(name: str, default: float) -> float:
    value = _read_optional_env(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_credentials_file(path: str | Path) -> tuple[ServiceCredentials, ...]:
    """Read a shared credentials file.

    The file holds ``{"credentials": [{"service_id", "url", "user",
    "password"}, ...]}``. Raises ``ConfigurationError`` when the file cannot
    be read or does not match that shape.
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Unable to read credentials file {path}") from exc
    try:
        parsed = _CredentialsFile.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid credentials file {path}") from exc
    return tuple(
        ServiceCredentials(
            service_id=entry.service_id,
            url=entry.url,
            username=entry.user,
            password=entry.password,
        )
        for entry in parsed.credentials
    )


def _credentials_from_env() -> ServiceCredentials | None:
    url = _read_optional_env("DIALOG_SERVICE_URL")
    if url is None:
        return None
    return ServiceCredentials(
        service_id=DIALOG_SERVICE_ID,
        url=url,
        username=_read_optional_env("DIALOG_SERVICE_USERNAME"),
        password=_read_optional_env("DIALOG_SERVICE_PASSWORD"),
    )


def load_client_config() -> ClientConfig:
    credentials: list[ServiceCredentials] = []
    credentials_path = _read_optional_env("COLLOQUY_CREDENTIALS_PATH")
    if credentials_path is not None:
        credentials.extend(load_credentials_file(credentials_path))

    env_credentials = _credentials_from_env()
    if env_credentials is not None and not any(
        entry.service_id == env_credentials.service_id for entry in credentials
    ):
        credentials.append(env_credentials)

    return ClientConfig(
        credentials=tuple(credentials),
        http_timeout_s=_read_float_env("DIALOG_HTTP_TIMEOUT_S", DEFAULT_HTTP_TIMEOUT_S),
        user_agent=os.getenv("DIALOG_HTTP_USER_AGENT", DEFAULT_USER_AGENT).strip()
        or DEFAULT_USER_AGENT,
    )

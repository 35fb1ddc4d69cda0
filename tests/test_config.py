import json

import pytest

from colloquy.core.config import (
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    DIALOG_SERVICE_ID,
    ClientConfig,
    ConfigurationError,
    ServiceCredentials,
    load_client_config,
    load_credentials_file,
)


def test_load_client_config_without_env_has_no_credentials() -> None:
    config = load_client_config()

    assert config.credentials == tuple()
    assert config.http_timeout_s == DEFAULT_HTTP_TIMEOUT_S
    assert config.user_agent == DEFAULT_USER_AGENT
    assert config.find_credentials(DIALOG_SERVICE_ID) is None


def test_load_client_config_reads_dialog_credentials_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DIALOG_SERVICE_URL", " https://dialog.example/api ")
    monkeypatch.setenv("DIALOG_SERVICE_USERNAME", "user")
    monkeypatch.setenv("DIALOG_SERVICE_PASSWORD", "secret")
    monkeypatch.setenv("DIALOG_HTTP_TIMEOUT_S", "12.5")

    config = load_client_config()

    assert config.find_credentials(DIALOG_SERVICE_ID) == ServiceCredentials(
        service_id=DIALOG_SERVICE_ID,
        url="https://dialog.example/api",
        username="user",
        password="secret",
    )
    assert config.http_timeout_s == 12.5


def test_invalid_timeout_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("DIALOG_HTTP_TIMEOUT_S", "soon")

    assert load_client_config().http_timeout_s == DEFAULT_HTTP_TIMEOUT_S


def test_credentials_file_takes_precedence_over_env(monkeypatch, tmp_path) -> None:
    path = tmp_path / "credentials.json"
    path.write_text(
        json.dumps(
            {
                "credentials": [
                    {
                        "service_id": DIALOG_SERVICE_ID,
                        "url": "https://file.example/api",
                        "user": "file-user",
                        "password": "file-secret",
                    },
                    {"service_id": "SpeechV1", "url": "https://speech.example"},
                ]
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("COLLOQUY_CREDENTIALS_PATH", str(path))
    monkeypatch.setenv("DIALOG_SERVICE_URL", "https://env.example/api")

    config = load_client_config()

    assert len(config.credentials) == 2
    dialog = config.find_credentials(DIALOG_SERVICE_ID)
    assert dialog is not None
    assert dialog.url == "https://file.example/api"
    assert dialog.has_basic_auth is True
    speech = config.find_credentials("SpeechV1")
    assert speech is not None
    assert speech.has_basic_auth is False


def test_invalid_credentials_file_raises_configuration_error(tmp_path) -> None:
    path = tmp_path / "credentials.json"
    path.write_text('{"credentials": [{"service_id": ""}]}', encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_credentials_file(path)


def test_missing_credentials_file_raises_configuration_error(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_credentials_file(tmp_path / "absent.json")


def test_find_credentials_returns_first_match() -> None:
    config = ClientConfig(
        credentials=(
            ServiceCredentials(service_id="DialogV1", url="https://a"),
            ServiceCredentials(service_id="DialogV1", url="https://b"),
        ),
        http_timeout_s=1.0,
        user_agent="ua",
    )

    found = config.find_credentials("DialogV1")

    assert found is not None
    assert found.url == "https://a"

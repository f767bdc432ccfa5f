from base64 import b64encode
from collections.abc import Generator
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from pytest_socket import disable_socket
from requests_mock import Mocker, adapter
from sqlalchemy.orm import Session

from weddingapi import config, database
from weddingapi.app import create_app
from weddingapi.config import SPOTIFY_TOKEN_URL

FAKE_ACCESS_TOKEN = "fake-access-token"  # noqa: S105
FAKE_CLIENT_ID = "fake-spotify-client-id"
FAKE_CLIENT_SECRET = "fake-spotify-client-secret"  # noqa: S105


def pytest_runtest_setup() -> None:
    disable_socket()


@pytest.fixture(autouse=True)
def set_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LOG_FILE", "/dev/null")  # DEBUG logs still written to stdout
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", FAKE_CLIENT_ID)
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", FAKE_CLIENT_SECRET)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'weddingapi.db'}")
    # Both are cached per process, every test gets its own
    monkeypatch.setattr(config, "_config", None)
    monkeypatch.setattr(database, "_database_engine", None)


@pytest.fixture
def app(set_env: None) -> Flask:  # noqa: ARG001
    flask_app = create_app(start_token_refresher=False)
    flask_app.config.update({"TESTING": True})
    return flask_app


@pytest.fixture
def client_without_token(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def client(app: Flask, client_without_token: FlaskClient) -> FlaskClient:
    app.extensions["token_holder"].set(FAKE_ACCESS_TOKEN)
    return client_without_token  # Actually has a token now


@pytest.fixture
def db_session(app: Flask) -> Generator[Session, None, None]:  # noqa: ARG001
    with Session(database.get_engine()) as sesh:
        yield sesh


@pytest.fixture
def mock_token_request(requests_mock: Mocker) -> adapter._Matcher:
    encoded_fake_auth = b64encode(
        f"{FAKE_CLIENT_ID}:{FAKE_CLIENT_SECRET}".encode()
    ).decode("utf8")
    return requests_mock.post(
        SPOTIFY_TOKEN_URL,
        request_headers={
            "content-type": "application/x-www-form-urlencoded",
            "Authorization": f"Basic {encoded_fake_auth}",
        },
        json={
            "access_token": f"{FAKE_ACCESS_TOKEN}_new",
            "token_type": "Bearer",
            "expires_in": 3600,
        },
    )

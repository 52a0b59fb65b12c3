"""Shared pytest fixtures: app config, a scripted backend and the Flask client."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
import requests

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from mediadesk import config as config_module, storage  # noqa: E402
from mediadesk.config import AppConfig  # noqa: E402
from mediadesk.main import create_app  # noqa: E402

API_URL = "http://backend.test/api"

PROFILE = {
    "id": 7,
    "email": "ada@analytical.io",
    "fullName": "Ada Lovelace",
    "dateOfBirth": "1990-12-10T00:00:00.000Z",
    "preferredLocation": {"id": 2, "locationName": "London"},
    "resumeSummary": "Analytical engines",
    "programmingSkills": [{"id": 1, "name": "Python"}, {"id": 3, "name": "Go"}],
}


class FakeResponse:
    def __init__(self, status_code: int, payload: Any, reason: str = ""):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason or ("OK" if status_code < 400 else "Error")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if isinstance(self._payload, (bytes, str)):
            return json.loads(self._payload)
        return self._payload


Scripted = Union[FakeResponse, Exception]


class FakeBackend:
    """Stands in for ``requests.Session``: scripted replies, recorded calls."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Scripted] = {}
        self.calls: List[Dict[str, Any]] = []

    def reply(self, method: str, endpoint: str, response: Scripted) -> None:
        self.routes[(method.upper(), endpoint)] = response

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        endpoint = url[len(API_URL):] if url.startswith(API_URL) else url
        self.calls.append({"method": method, "endpoint": endpoint, **kwargs})
        scripted = self.routes.get((method.upper(), endpoint))
        if scripted is None:
            raise AssertionError(f"Unexpected backend call: {method} {endpoint}")
        if isinstance(scripted, Exception):
            raise scripted
        return scripted

    def calls_to(self, method: str, endpoint: str) -> List[Dict[str, Any]]:
        return [
            call for call in self.calls
            if call["method"] == method.upper() and call["endpoint"] == endpoint
        ]


def envelope(
    data: Any = None,
    status: int = 200,
    success: bool = True,
    message: str = "OK",
    path: str = "",
) -> FakeResponse:
    return FakeResponse(
        status,
        {
            "success": success,
            "statusCode": status,
            "message": message,
            "path": path,
            "timestamp": "2024-05-01T10:00:00.000Z",
            "data": data,
        },
    )


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        api_url=API_URL,
        media_url="http://media.test/uploads",
        public_url="http://media.test",
        environment="test",
        secret_key="test-secret",
    )


@pytest.fixture(autouse=True)
def isolated_state(app_config: AppConfig, monkeypatch: pytest.MonkeyPatch):
    """Give every test its own config and an empty workspace store."""
    monkeypatch.setattr(config_module, "_config", app_config)
    storage.workspaces.clear()
    yield
    storage.workspaces.clear()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def app(app_config: AppConfig, backend: FakeBackend):
    flask_app = create_app(app_config, http=backend)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def sign_in(client, token: str = "tok-123", user: Optional[Dict[str, Any]] = None, registered: bool = False):
    """Put session cookies on the test client as a previous response would have."""
    client.set_cookie("access_token", token)
    if user is not None:
        client.set_cookie("user_data", json.dumps(user, separators=(",", ":")))
    if registered:
        client.set_cookie("userRegistered", "true")


def network_down() -> Exception:
    return requests.ConnectionError("backend unreachable")

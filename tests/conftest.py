import json
from typing import Any, Callable, Optional, Union

import pytest
import requests
from fastapi.testclient import TestClient

from quartermaster.api import deps
from quartermaster.config import settings

BASE_URL = settings.backend.base_url.rstrip("/")

ADMIN = {"_id": "u-1", "username": "admin", "role": "Admin", "email": "admin@example.mil"}
COMMANDER = {"_id": "u-2", "username": "cmdr1", "role": "BaseCommander", "assignedBase": "Base Alpha"}
LOGISTICS = {"_id": "u-3", "username": "log1", "role": "LogisticsOfficer", "assignedBase": "Base Bravo"}
USERS = {"admin": ADMIN, "cmdr1": COMMANDER, "log1": LOGISTICS}

Handler = Union[tuple, Callable[..., tuple]]


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self._body = body
        self.content = b"" if body is None else json.dumps(body).encode()

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeBackend:
    """
    Stands in for requests.Session. Routes by (METHOD, path) and records
    every call so tests can assert what reached the backend.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.calls: list[dict] = []
        self.tokens: dict[str, dict] = {}
        self.unreachable = False
        self.on("POST", "/auth/login", self._login)
        self.on("GET", "/auth/me", self._me)

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append({"method": method, "path": path, "params": params, "json": json, "headers": headers or {}})
        if self.unreachable:
            raise requests.ConnectionError("connection refused")
        handler = self.routes.get((method.upper(), path))
        if handler is None:
            return FakeResponse(404, {"error": f"No route {method} {path}"})
        status, body = handler(params=params, json=json, headers=headers or {}) if callable(handler) else handler
        return FakeResponse(status, body)

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [c["path"] for c in self.calls if method is None or c["method"] == method]

    def _login(self, json=None, **_):
        user = USERS.get((json or {}).get("username"))
        if user is None or json.get("password") != "secret":
            return 401, {"error": "Invalid credentials"}
        token = f"tok-{user['username']}"
        self.tokens[token] = user
        return 200, {"token": token, "user": user}

    def _me(self, headers=None, **_):
        auth = (headers or {}).get("Authorization", "")
        user = self.tokens.get(auth.removeprefix("Bearer "))
        if user is None:
            return 401, {"error": "Token is not valid"}
        return 200, {"user": user}


@pytest.fixture(autouse=True)
def reset_routing():
    """
    settings is a module-level singleton; restore anything a test changes.
    """
    original = settings.routing.model_copy(deep=True)
    yield
    settings.routing = original
    deps._gate = None
    deps._guard = None
    deps._http_session = None


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend):
    from quartermaster.api.main import create_app

    app = create_app(http_session=backend)
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def login(client):
    def _login(username: str, password: str = "secret"):
        resp = client.post("/login", json={"username": username, "password": password})
        assert resp.status_code == 303, resp.text
        return resp

    return _login

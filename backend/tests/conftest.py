"""Shared fixtures: a fake Unsplash behind httpx.MockTransport and an ASGI client per app."""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest

from app.config import Settings
from app.main import create_app
from services.store import InMemorySessionStore

SAMPLE_PHOTOS = {
    "results": [
        {
            "id": "p-red",
            "alt_description": "red car",
            "urls": {"small": "https://img.test/red-s.jpg", "thumb": "https://img.test/red-t.jpg"},
            "links": {"html": "https://unsplash.test/p-red"},
            "liked_by_user": False,
        },
        {
            "id": "p-blue",
            "alt_description": "blue sky",
            "urls": {"small": "https://img.test/blue-s.jpg", "thumb": "https://img.test/blue-t.jpg"},
            "links": {"html": "https://unsplash.test/p-blue"},
            "liked_by_user": False,
        },
    ]
}


class FakeUnsplash:
    """Route table keyed by (method, path); records every request it sees."""

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], dict[str, Any] | Exception] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def on(
        self,
        method: str,
        path: str,
        *,
        status_code: int = 200,
        json: Any = None,
        text: str | None = None,
    ) -> None:
        self._routes[(method, path)] = {"status_code": status_code, "json": json, "text": text}

    def fail(self, method: str, path: str, exc: Exception | None = None) -> None:
        self._routes[(method, path)] = exc or httpx.ConnectError("upstream unreachable")

    def last(self, path: str) -> httpx.Request:
        return [r for r in self.requests if r.url.path == path][-1]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"errors": ["not mocked"]})
        if isinstance(route, Exception):
            raise route
        if route["text"] is not None:
            return httpx.Response(route["status_code"], text=route["text"])
        return httpx.Response(route["status_code"], json=route["json"])


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "client_id": "test-client",
        "client_secret": "test-secret",
        "redirect_uri": "http://localhost:3000/api/auth/callback",
        "allowed_origin": "http://localhost:8080",
        "raw_scopes": "public write_likes",
        "app_key": "",
    }
    values.update(overrides)
    return Settings(**values)


def session_cookie(response: httpx.Response) -> str | None:
    """Value of the sid Set-Cookie header, if any."""
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name.strip() == "sid":
            return rest.split(";", 1)[0].strip('"')
    return None


@asynccontextmanager
async def api_client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        # ASGITransport skips the lifespan, so close the upstream client here.
        await app.state.unsplash.aclose()


@pytest.fixture
def upstream() -> FakeUnsplash:
    return FakeUnsplash()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "sample_photos.json"
    path.write_text(json.dumps(SAMPLE_PHOTOS), encoding="utf-8")
    return path


@pytest.fixture
def make_client(upstream: FakeUnsplash, store: InMemorySessionStore, sample_file):
    def _make(**overrides: Any):
        overrides.setdefault("sample_path", sample_file)
        app = create_app(make_settings(**overrides), session_store=store, transport=upstream.transport)
        return api_client(app)

    return _make


@pytest.fixture
async def client(make_client) -> AsyncIterator[httpx.AsyncClient]:
    async with make_client() as c:
        yield c


@pytest.fixture
def login(upstream: FakeUnsplash):
    """Run the OAuth callback against the fake token endpoint; returns the issued sid."""

    async def _login(client: httpx.AsyncClient, token: str = "user-token") -> str:
        upstream.on("POST", "/oauth/token", json={"access_token": token, "token_type": "bearer"})
        response = await client.get("/api/auth/callback", params={"code": "auth-code"})
        sid = session_cookie(response)
        assert sid, response.headers
        client.cookies.clear()
        return sid

    return _login

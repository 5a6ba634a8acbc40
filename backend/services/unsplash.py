"""Async client for the Unsplash REST API and OAuth token endpoint.

Transport failures surface as httpx.HTTPError; callers decide how to map them.
Non-2xx responses are returned, not raised, so routes can relay status and body.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from app.config import Settings
from models.credential import Credential

logger = logging.getLogger(__name__)

SEARCH_PER_PAGE = 20


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    text: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse the body. Raises ValueError when the body is not JSON."""
        return json.loads(self.text)

    def json_or(self, default: Any) -> Any:
        try:
            return self.json()
        except ValueError:
            return default


class UnsplashClient:
    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    def _api(self, path: str) -> str:
        return f"{self._settings.api_url.rstrip('/')}{path}"

    async def _request(
        self,
        method: str,
        url: str,
        credential: Credential,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> UpstreamResponse:
        request_headers = dict(headers or {})
        authorization = credential.authorization_header()
        if authorization:
            request_headers["Authorization"] = authorization
        resp = await self._http.request(method, url, params=params, headers=request_headers)
        logger.debug("[unsplash] %s %s -> %s", method, resp.request.url.path, resp.status_code)
        return UpstreamResponse(status_code=resp.status_code, text=resp.text)

    async def exchange_code(self, code: str) -> UpstreamResponse:
        """POST the authorization code to the OAuth token endpoint (form-encoded)."""
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._settings.redirect_uri,
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
        }
        resp = await self._http.post(
            self._settings.token_endpoint,
            data=form,
            headers={"Accept": "application/json"},
        )
        return UpstreamResponse(status_code=resp.status_code, text=resp.text)

    async def get_me(self, credential: Credential) -> UpstreamResponse:
        return await self._request("GET", self._api("/me"), credential)

    async def search_photos(
        self, credential: Credential, query: str, per_page: int = SEARCH_PER_PAGE
    ) -> UpstreamResponse:
        return await self._request(
            "GET",
            self._api("/search/photos"),
            credential,
            params={"query": query, "per_page": per_page},
        )

    async def random_photos(self, credential: Credential, count: int) -> UpstreamResponse:
        return await self._request(
            "GET", self._api("/photos/random"), credential, params={"count": count}
        )

    async def user_likes(
        self, credential: Credential, username: str, per_page: int, page: int
    ) -> UpstreamResponse:
        return await self._request(
            "GET",
            self._api(f"/users/{quote(username, safe='')}/likes"),
            credential,
            params={"per_page": per_page, "page": page},
        )

    async def set_like(self, credential: Credential, photo_id: str, liked: bool) -> UpstreamResponse:
        """POST to like, DELETE to unlike."""
        return await self._request(
            "POST" if liked else "DELETE",
            self._api(f"/photos/{quote(photo_id, safe='')}/like"),
            credential,
            headers={"Content-Type": "application/json"},
        )

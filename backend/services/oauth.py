"""OAuth2 authorization-code flow against Unsplash.

Client-visible states are LoggedOut -> PendingCallback -> LoggedIn; the server
keeps no per-flow record, only the session created on a successful callback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote, urlencode

import httpx

from app.config import Settings
from app.errors import ConfigurationError
from services.store import SessionStore
from services.unsplash import UnsplashClient

logger = logging.getLogger(__name__)


class TokenExchangeError(Exception):
    """The authorization code could not be turned into an access token."""


@dataclass(frozen=True)
class CallbackOutcome:
    location: str
    session_id: str | None = None

    @property
    def logged_in(self) -> bool:
        return self.session_id is not None


def build_authorize_url(settings: Settings) -> str:
    if not settings.client_id:
        raise ConfigurationError("Server not configured with UNSPLASH_CLIENT_ID")
    params = {
        "client_id": settings.client_id,
        "redirect_uri": settings.redirect_uri,
        "response_type": "code",
        "scope": settings.scopes,
    }
    return f"{settings.authorize_endpoint}?{urlencode(params, quote_via=quote)}"


class OAuthFlow:
    def __init__(self, settings: Settings, store: SessionStore, client: UnsplashClient) -> None:
        self._settings = settings
        self._store = store
        self._client = client

    @property
    def error_location(self) -> str:
        return f"{self._settings.allowed_origin}?auth=error"

    def begin_login(self) -> str:
        """LoggedOut -> PendingCallback: the upstream authorize URL to redirect to."""
        return build_authorize_url(self._settings)

    async def complete_callback(self, code: str | None) -> CallbackOutcome:
        """PendingCallback -> LoggedIn, or back to the frontend on failure."""
        if not code:
            # No error flag here; the frontend just lands logged out.
            return CallbackOutcome(location=self._settings.allowed_origin)
        try:
            access_token = await self._exchange(code)
        except TokenExchangeError as exc:
            logger.error("[oauth] Token exchange failed: %s", exc)
            return CallbackOutcome(location=self.error_location)
        except httpx.HTTPError as exc:
            logger.error("[oauth] Token exchange transport error: %s", exc, exc_info=True)
            return CallbackOutcome(location=self.error_location)
        session_id = self._store.create(access_token)
        logger.info("[oauth] Login complete; session issued")
        return CallbackOutcome(location=self._settings.allowed_origin, session_id=session_id)

    def logout(self, session_id: str | None) -> None:
        """LoggedIn -> LoggedOut. Safe to call without a session."""
        if session_id:
            self._store.delete(session_id)

    async def _exchange(self, code: str) -> str:
        resp = await self._client.exchange_code(code)
        if not resp.is_success:
            raise TokenExchangeError(f"status={resp.status_code} body={resp.text[:500]}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise TokenExchangeError(f"unparseable token response: {exc}") from exc
        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise TokenExchangeError("token response missing access_token")
        return access_token

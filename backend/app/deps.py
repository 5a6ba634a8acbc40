"""Request-scoped dependencies. Shared objects live on app.state, built once in create_app()."""

from fastapi import Request

from app.config import Settings
from models.session import Session
from services.oauth import OAuthFlow
from services.store import SessionStore
from services.unsplash import UnsplashClient

SESSION_COOKIE = "sid"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_unsplash(request: Request) -> UnsplashClient:
    return request.app.state.unsplash


def get_oauth(request: Request) -> OAuthFlow:
    return request.app.state.oauth


def get_session_id(request: Request) -> str | None:
    return request.cookies.get(SESSION_COOKIE) or None


def get_current_session(request: Request) -> Session | None:
    """None covers both a missing cookie and an unknown sid."""
    return get_store(request).get(get_session_id(request))

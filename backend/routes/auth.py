"""OAuth login/callback/logout plus read-only config introspection for setting up the Unsplash app."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from app.config import Settings
from app.deps import SESSION_COOKIE, get_oauth, get_session_id, get_settings
from services.oauth import OAuthFlow, build_authorize_url

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class ScopesResponse(BaseModel):
    scopes: str
    raw: str


class RedirectUriResponse(BaseModel):
    redirectUri: str


class AuthorizeUrlResponse(BaseModel):
    authorizeUrl: str


class LogoutResponse(BaseModel):
    ok: bool


@router.get("/login")
def login(oauth: OAuthFlow = Depends(get_oauth)) -> RedirectResponse:
    """Redirect the browser to the Unsplash authorize page."""
    url = oauth.begin_login()
    logger.info("[auth] GET /api/auth/login -> redirecting to Unsplash authorize")
    return RedirectResponse(url, status_code=302)


@router.get("/callback")
async def callback(
    code: str | None = Query(None),
    oauth: OAuthFlow = Depends(get_oauth),
) -> RedirectResponse:
    """Exchange ?code= for a token, issue the sid cookie, bounce back to the frontend."""
    outcome = await oauth.complete_callback(code)
    response = RedirectResponse(outcome.location, status_code=302)
    if outcome.session_id:
        response.set_cookie(
            SESSION_COOKIE,
            outcome.session_id,
            path="/",
            httponly=True,
            samesite="Lax",
        )
    return response


@router.post("/logout", response_model=LogoutResponse)
def logout(
    session_id: str | None = Depends(get_session_id),
    oauth: OAuthFlow = Depends(get_oauth),
) -> JSONResponse:
    oauth.logout(session_id)
    response = JSONResponse(status_code=200, content={"ok": True})
    response.set_cookie(
        SESSION_COOKIE,
        "",
        max_age=0,
        path="/",
        httponly=True,
        samesite="Lax",
    )
    return response


@router.get("/scopes", response_model=ScopesResponse)
def scopes(settings: Settings = Depends(get_settings)) -> ScopesResponse:
    return ScopesResponse(scopes=settings.scopes, raw=settings.raw_scopes)


@router.get("/redirect-uri", response_model=RedirectUriResponse)
def redirect_uri(settings: Settings = Depends(get_settings)) -> RedirectUriResponse:
    """The callback URL to paste into the Unsplash developer dashboard."""
    return RedirectUriResponse(redirectUri=settings.redirect_uri)


@router.get("/authorize-url", response_model=AuthorizeUrlResponse)
def authorize_url(settings: Settings = Depends(get_settings)) -> AuthorizeUrlResponse:
    return AuthorizeUrlResponse(authorizeUrl=build_authorize_url(settings))

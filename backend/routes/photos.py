"""Photo endpoints forwarded to Unsplash: profile, search, random, favorites, like/unlike."""

import logging
import re
from collections.abc import Awaitable
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response

from app.config import Settings
from app.deps import get_current_session, get_settings, get_unsplash
from app.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    ClientInputError,
    UpstreamError,
)
from models.credential import Credential, CredentialKind
from models.session import Session
from services.credentials import select_credential
from services.sample_photos import load_sample_photos, search_sample_photos, take_sample_photos
from services.unsplash import UnsplashClient, UpstreamResponse

router = APIRouter(tags=["photos"])
logger = logging.getLogger(__name__)

DEFAULT_RANDOM_COUNT = 12
MAX_RANDOM_COUNT = 30  # Unsplash max per request
DEFAULT_FAVORITES_PER_PAGE = 30
MAX_FAVORITES_PER_PAGE = 30

RELOGIN_MESSAGE = "Unauthorized. Please log in again."
WRITE_LIKES_HINT = (
    'Action requires Unsplash scope "write_likes". Update UNSPLASH_SCOPES to '
    '"public write_likes" and ensure the app is approved.'
)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_positive_int(raw: str | None, default: int, maximum: int | None = None) -> int:
    """Leading-integer parse; missing, garbage, or <= 0 gives default, then clamp to maximum."""
    match = _LEADING_INT.match(raw or "")
    value = int(match.group(1)) if match else 0
    if value <= 0:
        value = default
    if maximum is not None and value > maximum:
        value = maximum
    return value


def _require_session(session: Session | None, **extra: Any) -> Credential:
    if session is None or not session.access_token:
        raise AuthenticationError("Not authenticated", extra=extra or None)
    return Credential(CredentialKind.BEARER, session.access_token)


def _load_samples(settings: Settings) -> dict[str, Any]:
    try:
        return load_sample_photos(settings.sample_path)
    except (OSError, ValueError) as exc:
        logger.error("[photos] Sample dataset unreadable at %s: %s", settings.sample_path, exc)
        raise ApiError("Server error") from exc


async def _fetch_json(call: Awaitable[UpstreamResponse], failure: str) -> tuple[UpstreamResponse, Any]:
    """Await an upstream call and parse its JSON body; any failure becomes a 502."""
    try:
        resp = await call
    except httpx.HTTPError as exc:
        logger.error("[photos] %s: %s", failure, exc, exc_info=True)
        raise UpstreamError(failure) from exc
    try:
        return resp, resp.json()
    except ValueError as exc:
        logger.error("[photos] %s: unparseable body status=%s body=%.200s", failure, resp.status_code, resp.text)
        raise UpstreamError(failure) from exc


@router.get("/me")
async def me(
    session: Session | None = Depends(get_current_session),
    unsplash: UnsplashClient = Depends(get_unsplash),
) -> JSONResponse:
    credential = _require_session(session, authenticated=False)
    resp, body = await _fetch_json(unsplash.get_me(credential), "Failed to fetch profile")
    return JSONResponse(status_code=resp.status_code, content=body)


@router.get("/search")
async def search(
    q: str | None = Query(None),
    query: str | None = Query(None),
    session: Session | None = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
    unsplash: UnsplashClient = Depends(get_unsplash),
) -> JSONResponse:
    """Search photos as the user, else with the app key, else in the sample dataset."""
    term = (q or query or "").strip()
    if not term:
        raise ClientInputError("query parameter required")
    credential = select_credential(session, settings)
    if credential.uses_upstream:
        resp, body = await _fetch_json(unsplash.search_photos(credential, term), "Search failed")
        return JSONResponse(status_code=resp.status_code, content=body)
    logger.info("[photos] No Unsplash credential; searching sample dataset")
    return JSONResponse(status_code=200, content=search_sample_photos(_load_samples(settings), term))


@router.get("/random")
async def random_photos(
    count: str | None = Query(None),
    session: Session | None = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
    unsplash: UnsplashClient = Depends(get_unsplash),
) -> JSONResponse:
    n = parse_positive_int(count, DEFAULT_RANDOM_COUNT, MAX_RANDOM_COUNT)
    credential = select_credential(session, settings)
    if credential.uses_upstream:
        resp, body = await _fetch_json(unsplash.random_photos(credential, n), "Random photos failed")
        results = body if isinstance(body, list) else [body]
        return JSONResponse(status_code=resp.status_code, content={"results": results})
    return JSONResponse(status_code=200, content=take_sample_photos(_load_samples(settings), n))


@router.get("/favorites")
async def favorites(
    per_page: str | None = Query(None),
    page: str | None = Query(None),
    session: Session | None = Depends(get_current_session),
    unsplash: UnsplashClient = Depends(get_unsplash),
) -> JSONResponse:
    """Liked photos of the logged-in user. Always {"results": [...]} on success."""
    credential = _require_session(session)
    per_page_n = parse_positive_int(per_page, DEFAULT_FAVORITES_PER_PAGE, MAX_FAVORITES_PER_PAGE)
    page_n = parse_positive_int(page, 1)

    try:
        me_resp = await unsplash.get_me(credential)
    except httpx.HTTPError as exc:
        logger.error("[photos] Favorites /me transport error: %s", exc, exc_info=True)
        raise UpstreamError("Failed to fetch profile for favorites") from exc
    if not me_resp.is_success:
        logger.error("[photos] Favorites /me failed: status=%s body=%.200s", me_resp.status_code, me_resp.text)
        raise UpstreamError("Failed to fetch profile for favorites")
    profile = me_resp.json_or({})
    username = None
    if isinstance(profile, dict):
        nested = profile.get("user")
        username = profile.get("username") or (nested.get("username") if isinstance(nested, dict) else None)
    if not username:
        raise UpstreamError("Missing username in profile")

    try:
        likes_resp = await unsplash.user_likes(credential, username, per_page_n, page_n)
    except httpx.HTTPError as exc:
        logger.error("[photos] Favorites likes transport error: %s", exc, exc_info=True)
        raise UpstreamError("Failed to fetch favorites") from exc
    likes = likes_resp.json_or([])
    if not likes_resp.is_success:
        if likes_resp.status_code == 401:
            raise AuthenticationError(RELOGIN_MESSAGE)
        if likes_resp.status_code == 403:
            raise AuthorizationError("Access to favorites denied.")
        raise UpstreamError("Failed to fetch favorites", status_code=likes_resp.status_code, details=likes)
    return JSONResponse(status_code=200, content={"results": likes if isinstance(likes, list) else []})


@router.api_route("/photos/{photo_path:path}", methods=["POST", "DELETE"])
async def like_photo(
    photo_path: str,
    request: Request,
    session: Session | None = Depends(get_current_session),
    unsplash: UnsplashClient = Depends(get_unsplash),
) -> Response:
    """POST /api/photos/{id}/like likes, DELETE unlikes."""
    credential = _require_session(session)
    photo_id = photo_path.split("/", 1)[0]
    if not photo_id:
        raise ClientInputError("Missing photo id")
    try:
        resp = await unsplash.set_like(credential, photo_id, liked=request.method == "POST")
    except httpx.HTTPError as exc:
        logger.error("[photos] Like API failed for %s: %s", photo_id, exc, exc_info=True)
        raise UpstreamError("Failed to like photo") from exc
    if resp.status_code == 401:
        raise AuthenticationError(RELOGIN_MESSAGE)
    if resp.status_code == 403:
        logger.warning("[photos] Like denied for %s; token likely lacks write_likes", photo_id)
        raise AuthorizationError(WRITE_LIKES_HINT)
    if resp.status_code == 204:
        return Response(status_code=204)
    return JSONResponse(status_code=resp.status_code, content=resp.json_or({"raw": resp.text}))

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, load_settings
from app.errors import ApiError, api_error_handler, error_response, http_exception_handler
from routes import auth, photos
from services.oauth import OAuthFlow
from services.store import InMemorySessionStore, SessionStore
from services.unsplash import UnsplashClient

logger = logging.getLogger(__name__)


def cors_headers(allowed_origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "GET,POST,DELETE,OPTIONS",
    }


async def cors_middleware(request: Request, call_next) -> Response:
    """Answer every preflight with 204, stamp CORS on every response, never leak a raw fault."""
    headers = cors_headers(request.app.state.settings.allowed_origin)
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=headers)
    try:
        response = await call_next(request)
    except Exception as exc:  # noqa: BLE001
        logger.error(
            "[app] Unhandled error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        response = error_response(500, "Server error")
    response.headers.update(headers)
    return response


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


def create_app(
    settings: Settings | None = None,
    *,
    session_store: SessionStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the API. Tests pass their own settings and an httpx.MockTransport for Unsplash."""
    settings = settings or load_settings()
    store = session_store if session_store is not None else InMemorySessionStore()
    unsplash = UnsplashClient(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "[app] Photo gallery API ready (origin=%s scopes=%r client_id=%s app_key=%s)",
            settings.allowed_origin,
            settings.scopes,
            "set" if settings.client_id else "missing",
            "set" if settings.app_key else "missing",
        )
        yield
        await unsplash.aclose()

    app = FastAPI(title="Photo Gallery API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.session_store = store
    app.state.unsplash = unsplash
    app.state.oauth = OAuthFlow(settings, store, unsplash)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.middleware("http")(cors_middleware)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(auth.router, prefix="/api")
    app.include_router(photos.router, prefix="/api")
    return app

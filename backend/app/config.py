"""Server configuration, read once at startup from the environment (and .env)."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_PORT = 3000
DEFAULT_REDIRECT_URI = "http://localhost:3000/api/auth/callback"
DEFAULT_ALLOWED_ORIGIN = "http://localhost:8080"
DEFAULT_SCOPE = "public"
DEFAULT_API_URL = "https://api.unsplash.com"
DEFAULT_OAUTH_URL = "https://unsplash.com/oauth"
DEFAULT_SAMPLE_PATH = Path(__file__).resolve().parent / "data" / "sample_photos.json"

# write_photos is deprecated upstream and intentionally absent.
ALLOWED_SCOPES = frozenset(
    {
        "public",
        "read_user",
        "write_user",
        "read_photos",
        "write_likes",
        "read_collections",
        "write_collections",
    }
)

_SCOPE_SEPARATORS = re.compile(r"[\s,]+")


def sanitize_scopes(raw: str) -> str:
    """Strip quotes, split on spaces/commas, keep allowed scopes, space-join.

    Falls back to "public" when nothing valid survives. Idempotent.
    """
    cleaned = raw.replace('"', "").replace("'", "")
    scopes = [s for s in _SCOPE_SEPARATORS.split(cleaned) if s and s in ALLOWED_SCOPES]
    return " ".join(scopes or [DEFAULT_SCOPE])


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = DEFAULT_REDIRECT_URI
    allowed_origin: str = DEFAULT_ALLOWED_ORIGIN
    raw_scopes: str = DEFAULT_SCOPE
    app_key: str = ""
    sample_path: Path = DEFAULT_SAMPLE_PATH
    api_url: str = DEFAULT_API_URL
    oauth_url: str = DEFAULT_OAUTH_URL
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    scopes: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "scopes", sanitize_scopes(self.raw_scopes))

    @property
    def authorize_endpoint(self) -> str:
        return f"{self.oauth_url.rstrip('/')}/authorize"

    @property
    def token_endpoint(self) -> str:
        return f"{self.oauth_url.rstrip('/')}/token"


def load_settings() -> Settings:
    """Build Settings from os.environ after loading .env from the working directory."""
    load_dotenv(find_dotenv(usecwd=True))
    client_id = _env("UNSPLASH_CLIENT_ID")
    # Accept UNSPLASH_ACCESS_KEY, ACCESSKEY, or fall back to the OAuth client id.
    app_key = _env("UNSPLASH_ACCESS_KEY") or _env("ACCESSKEY") or client_id
    return Settings(
        client_id=client_id,
        client_secret=_env("UNSPLASH_CLIENT_SECRET"),
        redirect_uri=_env("REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        allowed_origin=_env("ALLOWED_ORIGIN") or DEFAULT_ALLOWED_ORIGIN,
        raw_scopes=_env("UNSPLASH_SCOPES") or DEFAULT_SCOPE,
        app_key=app_key,
        sample_path=Path(_env("SAMPLE_PHOTOS_PATH") or DEFAULT_SAMPLE_PATH),
        api_url=_env("UNSPLASH_API_URL") or DEFAULT_API_URL,
        oauth_url=_env("UNSPLASH_OAUTH_URL") or DEFAULT_OAUTH_URL,
        host=_env("HOST") or "0.0.0.0",
        port=int(_env("PORT") or DEFAULT_PORT),
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
    )

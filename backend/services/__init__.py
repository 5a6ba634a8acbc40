from .credentials import DEFAULT_PROVIDERS, select_credential
from .store import InMemorySessionStore, SessionStore
from .unsplash import UnsplashClient, UpstreamResponse

__all__ = [
    "DEFAULT_PROVIDERS",
    "InMemorySessionStore",
    "SessionStore",
    "UnsplashClient",
    "UpstreamResponse",
    "select_credential",
]

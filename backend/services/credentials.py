"""Credential precedence for upstream calls: user bearer token, then app key, then sample data."""

from collections.abc import Callable, Sequence

from app.config import Settings
from models.credential import Credential, CredentialKind
from models.session import Session

CredentialProvider = Callable[[Session | None, Settings], Credential | None]


def from_session(session: Session | None, settings: Settings) -> Credential | None:
    if session is not None and session.access_token:
        return Credential(CredentialKind.BEARER, session.access_token)
    return None


def from_app_key(session: Session | None, settings: Settings) -> Credential | None:
    if settings.app_key:
        return Credential(CredentialKind.APP_KEY, settings.app_key)
    return None


def from_sample_dataset(session: Session | None, settings: Settings) -> Credential | None:
    return Credential(CredentialKind.SAMPLE)


DEFAULT_PROVIDERS: tuple[CredentialProvider, ...] = (
    from_session,
    from_app_key,
    from_sample_dataset,
)


def select_credential(
    session: Session | None,
    settings: Settings,
    providers: Sequence[CredentialProvider] = DEFAULT_PROVIDERS,
) -> Credential:
    """Return the first credential any provider yields, in order."""
    for provider in providers:
        credential = provider(session, settings)
        if credential is not None:
            return credential
    raise LookupError("No credential provider yielded a credential")

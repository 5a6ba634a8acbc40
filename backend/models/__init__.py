from .credential import Credential, CredentialKind
from .session import Session

__all__ = [
    "Credential",
    "CredentialKind",
    "Session",
]

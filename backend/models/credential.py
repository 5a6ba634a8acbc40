from dataclasses import dataclass
from enum import Enum


class CredentialKind(str, Enum):
    BEARER = "bearer"
    APP_KEY = "app_key"
    SAMPLE = "sample"


@dataclass(frozen=True)
class Credential:
    kind: CredentialKind
    value: str | None = None

    @property
    def uses_upstream(self) -> bool:
        return self.kind is not CredentialKind.SAMPLE

    def authorization_header(self) -> str | None:
        """Value for the Authorization header, or None for the local sample dataset."""
        if self.kind is CredentialKind.BEARER:
            return f"Bearer {self.value}"
        if self.kind is CredentialKind.APP_KEY:
            return f"Client-ID {self.value}"
        return None

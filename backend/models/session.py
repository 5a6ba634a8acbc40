from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class Session:
    session_id: str                        # value of the sid cookie
    access_token: str                      # Unsplash user bearer token
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

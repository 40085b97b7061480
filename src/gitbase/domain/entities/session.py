"""Session entity for logged-in users.

Sessions live in process memory only and disappear when the process exits.
"""

import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass
class Session:
    """An authenticated session.

    Attributes:
        id: Unique identifier of the session.
        user_id: ID of the user record the session belongs to.
        token: Opaque bearer token handed to the client.
        expires_at: When the session is meant to expire.
        metadata: Free-form data attached by the caller.
        user: Snapshot of the user record at login, without its password.
        created_at: When the session was created.
    """

    user_id: str
    token: str
    expires_at: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    metadata: dict[str, Any] = field(default_factory=dict)
    user: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def start(
        cls,
        user: dict[str, Any],
        ttl: timedelta,
        metadata: dict[str, Any] | None = None,
    ) -> "Session":
        """Mint a new session for a user record."""
        public_user = {key: value for key, value in user.items() if key != "password"}
        return cls(
            user_id=user["id"],
            token=secrets.token_urlsafe(32),
            expires_at=datetime.now(timezone.utc) + ttl,
            metadata=metadata or {},
            user=public_user,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pshop.time_utils import parse_iso_datetime, utcnow


@dataclass
class ClientSession:
    """Session handed out by login/register, held by one ApiClient."""
    id: str
    user_id: str
    username: str
    expires_at: datetime | None = None

    @classmethod
    def from_dict(cls, payload: dict) -> "ClientSession":
        return cls(
            id=payload["id"],
            user_id=payload.get("userId", ""),
            username=payload.get("username", ""),
            expires_at=parse_iso_datetime(payload.get("expiresAt")),
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

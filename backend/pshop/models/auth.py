from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from pshop.time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    Registered account. One user is one tenant.

    Usernames are stored lower-cased so uniqueness and lookups are
    case-insensitive; ``display_name`` keeps the spelling used at sign-up.
    """
    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True, default=lambda: new_id("user"))
    username = db.Column(db.String(100), nullable=False, unique=True, index=True)

    # bcrypt hash (legacy rows may still hold an unsalted SHA-256 hex digest)
    password_hash = db.Column(db.String(255), nullable=False)

    display_name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    sessions = db.relationship(
        "SessionToken",
        backref="user",
        lazy=True,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "createdAt": to_utc_z(self.created_at),
        }


class SessionToken(db.Model):
    """
    Bearer session with a fixed expiry.

    Only the SHA-256 digest of the token is stored; the plaintext is handed
    to the client once, at login/register.
    """
    __tablename__ = "sessions"

    token_hash = db.Column(db.String(64), primary_key=True)
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Snapshot of the username at session creation
    username = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    def is_valid_at(self, now) -> bool:
        return now < self.expires_at

    def to_dict(self, token: str | None = None) -> dict:
        return {
            "id": token,
            "userId": self.user_id,
            "username": self.username,
            "createdAt": to_utc_z(self.created_at),
            "expiresAt": to_utc_z(self.expires_at),
        }

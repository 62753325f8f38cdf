# Overview: Session store; opaque bearer tokens with a fixed expiry and lazy sweep.

"""
Session store

Login and register hand out an opaque bearer token; every data request
resolves it back to a user here.

Rules:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Fixed absolute timeout (SESSION_TTL_HOURS, 24h by default), no sliding
- Expired rows are deleted lazily, on every lookup, for all users
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, User
from pshop.time_utils import utcnow

DEFAULT_SESSION_TTL = timedelta(hours=24)


@dataclass
class SessionContext:
    """Resolved session returned by find_valid_session."""
    user: User
    session: SessionToken


def generate_token() -> str:
    """64 hex chars. Only the client ever sees this value."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Hex digest is the sessions primary key
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def session_ttl() -> timedelta:
    hours = current_app.config.get("SESSION_TTL_HOURS")
    return timedelta(hours=hours) if hours else DEFAULT_SESSION_TTL


def create_session(user_id: str, username: str) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        token_hash=hash_token(plaintext_token),
        user_id=user_id,
        username=username,
        created_at=now,
        expires_at=now + session_ttl(),
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def purge_expired_sessions() -> int:
    """Delete every session whose expiry is in the past. Returns the count."""
    deleted = db.session.query(SessionToken).filter(
        SessionToken.expires_at < utcnow()
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted


def find_valid_session(token: str | None) -> SessionContext | None:
    """
    Resolve a token to its session and user.

    Side effect: sweeps all expired sessions first. Returns None if the
    token is empty, unknown, expired, or its user no longer exists.
    """
    purge_expired_sessions()

    if not token:
        return None

    session = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).first()
    if session is None or not session.is_valid_at(utcnow()):
        return None

    user = db.session.get(User, session.user_id)
    if user is None:
        return None

    return SessionContext(user=user, session=session)


def delete_session(token: str | None) -> bool:
    """
    Delete one session. Idempotent.

    Returns True if a row was removed, False if the token was unknown.
    """
    if not token:
        return False
    deleted = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token)
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted > 0


def delete_sessions_for_user(user_id: str) -> int:
    """
    Delete all sessions of a user.

    Called by login (one live session per user) and by password reset.
    """
    deleted = db.session.query(SessionToken).filter_by(
        user_id=user_id
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted

# Overview: Service-layer operations for auth; wraps the credential and session stores.

"""
Authentication Service

State per token: Anonymous -> Authenticated (login/register) ->
Anonymous (logout, expiry, or password reset).

SECURITY NOTES:
- Passwords hashed with bcrypt (BCRYPT_ROUNDS, 12 by default)
- Legacy unsalted SHA-256 hashes are accepted once and re-hashed on login
- Registration and password reset are gated by the shared admin code
  (PSHOP_ADMIN_CODE), compared in constant time
- Login failures use one message for unknown user and wrong password
- Every attempt is written to the security_events audit trail
"""

from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from dataclasses import dataclass

import bcrypt
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    TooLongError,
    TooShortError,
)
from ..extensions import db
from ..models import SessionToken, User
from . import audit_service, session_service, user_service

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 100
MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

_LEGACY_SHA256 = re.compile(r"^[0-9a-f]{64}$")

_DUMMY_HASH_KEY = "pshop_dummy_password_hash"


@dataclass
class AuthResult:
    user: User
    session: SessionToken | None
    token: str | None

    def to_dict(self) -> dict:
        return {
            "user": self.user.to_dict(),
            "session": self.session.to_dict(self.token) if self.session else None,
        }


@dataclass
class SessionCheck:
    authenticated: bool
    user: User | None = None

    def to_dict(self) -> dict:
        return {
            "authenticated": self.authenticated,
            "user": self.user.to_dict() if self.user else None,
        }


def validate_username(username: str) -> None:
    if len(username) < MIN_USERNAME_LENGTH:
        raise TooShortError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")
    if len(username) > MAX_USERNAME_LENGTH:
        raise TooLongError(f"Username must be at most {MAX_USERNAME_LENGTH} characters long")


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise TooShortError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise TooLongError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost factor from BCRYPT_ROUNDS."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def _dummy_hash() -> str:
    # Compared against when the username is unknown so both failure paths cost the same
    cached = current_app.extensions.get(_DUMMY_HASH_KEY)
    if cached is None:
        cached = hash_password("pshop-dummy-password")
        current_app.extensions[_DUMMY_HASH_KEY] = cached
    return cached


def is_legacy_hash(password_hash: str) -> bool:
    return bool(_LEGACY_SHA256.match(password_hash))


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against a stored hash.

    Rows imported from the previous deployment hold a bare SHA-256 hex
    digest; those are compared in constant time. Everything else is bcrypt.
    """
    if is_legacy_hash(password_hash):
        digest = hashlib.sha256(password.encode('utf-8')).hexdigest()
        return hmac.compare_digest(digest, password_hash)

    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash or over-long input
        return False


def check_admin_code(admin_code: str) -> bool:
    expected = current_app.config.get("PSHOP_ADMIN_CODE") or ""
    if not expected:
        return False
    return secrets.compare_digest(admin_code.strip().encode("utf-8"), expected.encode("utf-8"))


def register(username: str, password: str, admin_code: str) -> AuthResult:
    """
    Create an account and open a first session.

    Raises TooShortError/TooLongError, ForbiddenError (wrong admin code),
    ConflictError (username taken). A failure while creating the session
    does not undo the account: the result then carries no session and the
    caller has to log in.
    """
    username = username.strip()
    validate_username(username)
    validate_password(password)

    if not check_admin_code(admin_code):
        audit_service.log_security_event(
            "REGISTER_DENIED", success=False, action=username, reason="Invalid admin code"
        )
        raise ForbiddenError("Invalid admin code")

    try:
        user = user_service.create_user(
            username=username,
            password_hash=hash_password(password),
            display_name=username,
        )
    except ConflictError:
        audit_service.log_security_event(
            "REGISTER_DENIED", success=False, action=username.lower(), reason="Username taken"
        )
        raise
    audit_service.log_security_event("USER_REGISTERED", success=True, user_id=user.id, action=user.username)

    try:
        session, token = session_service.create_session(user.id, user.username)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to create session for new user %s", user.id)
        return AuthResult(user=user, session=None, token=None)

    return AuthResult(user=user, session=session, token=token)


def login(username: str, password: str) -> AuthResult:
    """
    Authenticate and replace all of the user's sessions with a new one.

    Raises InvalidCredentialsError for unknown user and wrong password alike.
    """
    user = user_service.find_user_by_username(username)

    if user is None:
        verify_password(password, _dummy_hash())
        audit_service.log_security_event(
            "LOGIN_FAILED", success=False, action=username.strip().lower(), reason="Unknown username"
        )
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        audit_service.log_security_event(
            "LOGIN_FAILED", success=False, user_id=user.id, action=user.username, reason="Invalid password"
        )
        raise InvalidCredentialsError()

    if is_legacy_hash(user.password_hash):
        user_service.update_password(user.id, hash_password(password))
        current_app.logger.info("Upgraded legacy password hash for user %s", user.id)

    session_service.delete_sessions_for_user(user.id)
    session, token = session_service.create_session(user.id, user.username)

    audit_service.log_security_event("LOGIN_SUCCESS", success=True, user_id=user.id, action=user.username)
    return AuthResult(user=user, session=session, token=token)


def reset_password(username: str, new_password: str, admin_code: str) -> None:
    """
    Set a new password with the admin code and sign the user out everywhere.

    Raises TooShortError/TooLongError, ForbiddenError, NotFoundError.
    """
    validate_password(new_password)

    if not check_admin_code(admin_code):
        audit_service.log_security_event(
            "PASSWORD_RESET_DENIED", success=False, action=username.strip().lower(), reason="Invalid admin code"
        )
        raise ForbiddenError("Invalid admin code")

    user = user_service.find_user_by_username(username)
    if user is None:
        audit_service.log_security_event(
            "PASSWORD_RESET_DENIED", success=False, action=username.strip().lower(), reason="Unknown username"
        )
        raise NotFoundError("No account found with this username")

    user_service.update_password(user.id, hash_password(new_password))
    session_service.delete_sessions_for_user(user.id)

    audit_service.log_security_event("PASSWORD_RESET", success=True, user_id=user.id, action=user.username)


def check_session(token: str | None) -> SessionCheck:
    """Never raises for a bad token: it is simply not authenticated."""
    context = session_service.find_valid_session(token)
    if context is None:
        return SessionCheck(authenticated=False)
    return SessionCheck(authenticated=True, user=context.user)


def logout(token: str | None) -> None:
    """Delete the session. Unknown or missing tokens are not an error."""
    context = session_service.find_valid_session(token)
    session_service.delete_session(token)
    if context is not None:
        audit_service.log_security_event(
            "LOGOUT", success=True, user_id=context.user.id, action=context.user.username
        )


def has_any_user() -> bool:
    return user_service.has_any_user()

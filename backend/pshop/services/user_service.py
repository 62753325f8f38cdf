# Overview: Credential store; user records keyed by a case-insensitive username.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError
from ..extensions import db
from ..models import User


def normalize_username(username: str) -> str:
    return username.strip().lower()


def create_user(username: str, password_hash: str, display_name: str) -> User:
    """
    Persist a new user.

    Raises ConflictError if the lower-cased username is taken. The unique
    index backs the pre-check when two registrations race.
    """
    normalized = normalize_username(username)
    if find_user_by_username(normalized) is not None:
        raise ConflictError("This username is already taken")

    user = User(
        username=normalized,
        password_hash=password_hash,
        display_name=display_name.strip(),
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("This username is already taken")
    return user


def find_user_by_username(username: str) -> User | None:
    return db.session.query(User).filter_by(username=normalize_username(username)).first()


def get_user(user_id: str) -> User | None:
    return db.session.get(User, user_id)


def update_password(user_id: str, new_hash: str) -> User:
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    user.password_hash = new_hash
    db.session.commit()
    return user


def has_any_user() -> bool:
    return db.session.query(User.id).first() is not None


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.created_at.asc()).all()

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Theme
from ..schemas import ThemeInput
from pshop.time_utils import utcnow


def get_theme(user_id: str) -> Theme | None:
    return db.session.get(Theme, user_id)


def _apply(theme: Theme, data: ThemeInput) -> None:
    theme.colors = dict(data.colors)
    theme.mode = data.mode
    theme.updated_at = utcnow()


def save_theme(user_id: str, data: ThemeInput) -> Theme:
    """Upsert: one theme row per user."""
    theme = get_theme(user_id)
    if theme is not None:
        _apply(theme, data)
        db.session.commit()
        return theme

    theme = Theme(user_id=user_id)
    _apply(theme, data)
    db.session.add(theme)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request inserted the row first; update it instead
        db.session.rollback()
        theme = get_theme(user_id)
        _apply(theme, data)
        db.session.commit()
    return theme

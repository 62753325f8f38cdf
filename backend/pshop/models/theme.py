from __future__ import annotations

from ..extensions import db
from pshop.time_utils import to_utc_z, utcnow


class Theme(db.Model):
    """Per-user display preferences (one row per user, upserted)."""
    __tablename__ = "themes"

    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    colors = db.Column(db.JSON, nullable=False, default=dict)
    mode = db.Column(db.String(16), nullable=False, default="light")
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "colors": dict(self.colors or {}),
            "mode": self.mode,
            "updatedAt": to_utc_z(self.updated_at),
        }

from __future__ import annotations

from flask import current_app, has_app_context
from sqlalchemy.dialects import mysql

from ..extensions import db
from ..identifiers import new_id
from ..payloads import PayloadDecodeError, decode_photos, decode_specifications
from pshop.time_utils import to_utc_z, utcnow

# LONGTEXT on MySQL: a single row can carry several MB of base64 photos
LongText = db.Text().with_variant(mysql.LONGTEXT(), "mysql")


def _warn(message: str) -> None:
    if has_app_context():
        current_app.logger.warning(message)


class Product(db.Model):
    """
    Catalog entry owned by exactly one user.

    ``margin`` is stored redundantly; services recompute it on every write.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_user_created", "user_id", "created_at"),
    )

    id = db.Column(db.String(64), primary_key=True, default=lambda: new_id("product"))
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True, index=True)

    partner_price = db.Column(db.Numeric(15, 2), nullable=False)
    resale_price = db.Column(db.Numeric(15, 2), nullable=False)
    margin = db.Column(db.Numeric(15, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    # JSON-encoded; decoded defensively (see payloads.py)
    photos = db.Column(LongText, nullable=True)
    specifications = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Product id={self.id} user_id={self.user_id} name={self.name!r}>"

    @property
    def photo_list(self) -> list[str]:
        try:
            return decode_photos(self.photos)
        except PayloadDecodeError as exc:
            _warn(f"Discarding corrupt photos of product {self.id}: {exc}")
            return []

    @property
    def specification_map(self) -> dict[str, str]:
        try:
            return decode_specifications(self.specifications)
        except PayloadDecodeError as exc:
            _warn(f"Discarding corrupt specifications of product {self.id}: {exc}")
            return {}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "description": self.description or "",
            "category": self.category or "",
            "partnerPrice": float(self.partner_price),
            "resalePrice": float(self.resale_price),
            "margin": float(self.margin),
            "stock": int(self.stock),
            "photos": self.photo_list,
            "specifications": self.specification_map,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }

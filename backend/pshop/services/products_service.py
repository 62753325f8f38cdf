# backend/pshop/services/products_service.py
"""
Products Service

All product operations are tenant-scoped: list/get/update/delete only
ever see rows whose user_id is the caller's.

Photos: entries at or under MIN_PHOTO_LENGTH characters are dropped on
write (placeholders left by failed uploads), and the serialized array is
capped at MAX_PHOTOS_PAYLOAD_BYTES.
"""
from __future__ import annotations

from flask import current_app

from ..errors import PayloadTooLargeError
from ..extensions import db
from ..models import Product
from ..payloads import clean_photos, compute_margin, encode_photos, encode_specifications, to_money
from ..schemas import ProductInput
from .tenant_service import require_owned, scoped_query
from pshop.time_utils import utcnow

DEFAULT_MAX_PHOTOS_BYTES = 16 * 1024 * 1024
DEFAULT_MIN_PHOTO_LENGTH = 100


def prepare_photos(photos: list) -> tuple[list[str], str]:
    """
    Filter and serialize a photos array.

    Returns (kept_photos, encoded_json). Raises PayloadTooLargeError when
    the encoded array exceeds the configured cap.
    """
    min_length = current_app.config.get("MIN_PHOTO_LENGTH", DEFAULT_MIN_PHOTO_LENGTH)
    max_bytes = current_app.config.get("MAX_PHOTOS_PAYLOAD_BYTES", DEFAULT_MAX_PHOTOS_BYTES)

    kept = clean_photos(photos, min_length)
    encoded = encode_photos(kept)
    if len(encoded.encode("utf-8")) > max_bytes:
        raise PayloadTooLargeError(
            f"Photos are too large (max {max_bytes // (1024 * 1024)} MB)"
        )
    if len(kept) != len(photos):
        current_app.logger.info("Dropped %d invalid photo entries", len(photos) - len(kept))
    return kept, encoded


def _apply_input(product: Product, data: ProductInput) -> int:
    kept, encoded = prepare_photos(data.photos)

    product.name = data.name
    product.description = data.description
    product.category = data.category
    product.partner_price = to_money(data.partner_price)
    product.resale_price = to_money(data.resale_price)
    product.margin = compute_margin(data.partner_price, data.resale_price)
    product.stock = data.stock
    product.photos = encoded
    product.specifications = encode_specifications(data.specifications)
    return len(kept)


def list_products(user_id: str) -> list[dict]:
    """
    Tenant-scoped product listing, newest first.

    Corrupt photos/specifications payloads are replaced by empty values
    per row (see Product.photo_list); one bad row never fails the listing.
    """
    products = (
        scoped_query(Product, user_id)
        .order_by(Product.created_at.desc(), Product.id.asc())
        .all()
    )
    return [p.to_dict() for p in products]


def get_product(user_id: str, product_id: str) -> Product:
    return require_owned(Product, product_id, user_id, label="Product")


def create_product(user_id: str, data: ProductInput) -> tuple[Product, int]:
    """Create product. Returns (product, kept_photo_count)."""
    now = utcnow()
    product = Product(user_id=user_id, created_at=now, updated_at=now)
    photos_count = _apply_input(product, data)

    db.session.add(product)
    db.session.commit()
    return product, photos_count


def update_product(user_id: str, product_id: str, data: ProductInput) -> tuple[Product, int]:
    """Full replacement of the editable fields. Raises NotFoundError if not owned."""
    product = get_product(user_id, product_id)
    photos_count = _apply_input(product, data)
    product.updated_at = utcnow()

    db.session.commit()
    return product, photos_count


def delete_product(user_id: str, product_id: str) -> None:
    """Hard delete. Past sales keep their product_name snapshot."""
    product = get_product(user_id, product_id)
    db.session.delete(product)
    db.session.commit()

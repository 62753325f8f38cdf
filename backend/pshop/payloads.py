# Overview: Pure helpers for the JSON-encoded product columns and derived money fields.

"""
Helpers shared by the server services and the offline LocalStore.

Photos are data-URL strings kept in a JSON array column; specifications
are a JSON object of free-form string values. Rows written by older
clients can hold anything, so decoding is tolerant and filtering is
applied on both write and read.
"""

from __future__ import annotations

import json
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

# Entries at or under this length on read are leftovers of failed uploads
MIN_STORED_PHOTO_LENGTH = 50

CENTS = Decimal("0.01")


class PayloadDecodeError(ValueError):
    """Raised when a stored JSON column cannot be decoded to the expected shape."""


def clean_photos(photos: Iterable[Any], min_length: int) -> list[str]:
    """Keep non-empty string photos longer than ``min_length``, in order."""
    return [
        photo for photo in photos
        if isinstance(photo, str) and len(photo.strip()) > min_length
    ]


def encode_photos(photos: list[str]) -> str:
    return json.dumps(photos, separators=(",", ":"))


def decode_photos(raw: str | None) -> list[str]:
    if raw is None or raw.strip() in ("", "null"):
        return []
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise PayloadDecodeError(f"photos is not valid JSON: {exc}") from exc
    if not isinstance(value, list):
        raise PayloadDecodeError("photos is not a JSON array")
    return clean_photos(value, MIN_STORED_PHOTO_LENGTH)


def encode_specifications(specs: dict[str, str]) -> str:
    return json.dumps(specs, separators=(",", ":"), ensure_ascii=False)


def decode_specifications(raw: str | None) -> dict[str, str]:
    if raw is None or raw.strip() in ("", "null"):
        return {}
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise PayloadDecodeError(f"specifications is not valid JSON: {exc}") from exc
    # PHP's json_encode wrote empty maps as []
    if value == []:
        return {}
    if not isinstance(value, dict):
        raise PayloadDecodeError("specifications is not a JSON object")
    return {str(k): "" if v is None else str(v) for k, v in value.items()}


def to_money(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_margin(partner_price: Decimal, resale_price: Decimal) -> Decimal:
    return to_money(resale_price - partner_price)


def compute_sale_amounts(
    *,
    quantity: int,
    unit_price: Decimal | None,
    advisory_total: Decimal | None,
    advisory_profit: Decimal | None,
    partner_price: Decimal | None,
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Return ``(unit_price, total, profit)`` for a sale.

    The unit price wins over a client-sent total. Without a unit price the
    client total is kept as sent and the unit price is derived from it, so
    a total that does not divide evenly (100 for 3) is not rounded away.
    Profit is recomputed from the product's partner price when one is
    known; otherwise the client's figure is the only information available.
    """
    if unit_price is not None:
        unit_price = to_money(unit_price)
        total = to_money(unit_price * quantity)
    elif advisory_total is not None:
        total = to_money(advisory_total)
        unit_price = to_money(total / quantity)
    else:
        unit_price = total = to_money(0)
    if partner_price is not None:
        profit = to_money(total - partner_price * quantity)
    else:
        profit = to_money(advisory_profit) if advisory_profit is not None else to_money(0)
    return unit_price, total, profit

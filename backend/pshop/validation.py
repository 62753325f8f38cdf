# Overview: Field-level coercion helpers used by the request schemas.

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import TooLongError, ValidationError
from pshop.time_utils import parse_iso_datetime

# Maximum amount: 9,999,999,999,999.99 fits NUMERIC(15, 2)
MAX_AMOUNT = Decimal("9999999999999.99")


def require_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def check_fields(payload: dict, *, allowed: set[str], required: set[str]) -> None:
    """
    Reject unknown keys and missing required keys.

    A required key that is present but null/blank counts as missing.
    """
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}")

    missing = sorted(
        k for k in required
        if payload.get(k) is None or (isinstance(payload.get(k), str) and not payload[k].strip())
    )
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def coerce_str(
    name: str,
    value: Any,
    *,
    max_length: int | None = None,
    default: str = "",
    strip: bool = True,
) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    if strip:
        value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise TooLongError(f"{name} must be at most {max_length} characters")
    return value


def coerce_int(name: str, value: Any) -> int:
    # bool is a subclass of int; never accept it as a number
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        # Reject scientific notation (e.g., "1e15") and decimals (e.g., "12.5")
        if not stripped or 'e' in stripped.lower() or '.' in stripped:
            raise ValidationError(f"{name} must be a plain integer")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{name} must be an integer")
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{name} must be an integer, not a decimal")
    raise ValidationError(f"{name} must be an integer")


def coerce_money(name: str, value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(f"{name} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{name} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{name} must be a finite number")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{name} is out of range")
    return amount


def coerce_datetime(name: str, value: Any, *, default: datetime) -> datetime:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be an ISO-8601 datetime")
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 datetime")
    return parsed or default


def coerce_str_map(name: str, value: Any, *, max_length: int = 255) -> dict[str, str]:
    """Object of free-form string values; numbers are accepted and stringified."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"{name} must be an object")
    result = {}
    for key, item in value.items():
        if item is None:
            item = ""
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            item = str(item)
        elif not isinstance(item, str):
            raise ValidationError(f"{name}.{key} must be a string")
        item = item.strip()
        if len(item) > max_length:
            raise TooLongError(f"{name}.{key} must be at most {max_length} characters")
        result[str(key)] = item
    return result

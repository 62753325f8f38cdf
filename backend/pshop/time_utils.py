"""
UTC clock and the timestamp format used on the wire.

Every DateTime column holds naive UTC; JSON carries ``2026-03-04T08:00:00Z``.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """
    ``saleDate`` / ``expenseDate`` / ``expiresAt`` to naive UTC.

    Blank is None. A bare date is midnight UTC, a naive datetime is taken
    as UTC, an offset or ``Z`` suffix is converted. Raises ValueError on
    anything else.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_utc_z(dt: datetime | None) -> str | None:
    """Whole seconds with a ``Z`` suffix; naive values are already UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat() + "Z"

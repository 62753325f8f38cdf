from __future__ import annotations

import uuid


def new_id(prefix: str) -> str:
    """Opaque string id, e.g. ``product-3f9c...``."""
    return f"{prefix}-{uuid.uuid4().hex}"

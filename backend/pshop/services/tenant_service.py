"""
Tenant Scoping Helpers

WHY: Every product, sale, expense and theme row belongs to exactly one
user. Ownership is checked in the same WHERE clause that finds the row,
so a row owned by someone else is indistinguishable from a missing one.

SECURITY INVARIANTS:
1. Every data request carries the authenticated user id (g.user_id)
2. Every query touching tenant data filters by that id
3. Cross-tenant access is reported as NotFound, never Forbidden
"""

from __future__ import annotations

from ..errors import NotFoundError
from ..extensions import db


def scoped_query(model, user_id: str):
    """Query over ``model`` restricted to rows owned by ``user_id``."""
    return db.session.query(model).filter(model.user_id == user_id)


def require_owned(model, entity_id: str | None, user_id: str, *, label: str):
    """
    Fetch a row by id within the caller's tenant.

    Raises NotFoundError when the id is empty, unknown, or owned by another user.
    """
    if not entity_id:
        raise NotFoundError(f"{label} not found")
    entity = scoped_query(model, user_id).filter(model.id == entity_id).first()
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity

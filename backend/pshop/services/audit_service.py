# Overview: Append-only audit trail for authentication events.

from __future__ import annotations

from flask import current_app, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SecurityEvent
from pshop.time_utils import utcnow


def log_security_event(
    event_type: str,
    success: bool,
    user_id: str | None = None,
    action: str | None = None,
    reason: str | None = None,
) -> SecurityEvent | None:
    """
    Log security event to audit trail.

    WHY: Immutable audit log for support and abuse detection. Every login
    attempt, registration and password reset is recorded.

    Client context (path, IP, user agent) is taken from the current request
    when there is one. A failing audit write is logged and swallowed: it
    must not change the outcome of the operation being audited.

    event_type examples:
    - LOGIN_SUCCESS / LOGIN_FAILED
    - USER_REGISTERED / REGISTER_DENIED
    - PASSWORD_RESET / PASSWORD_RESET_DENIED
    - LOGOUT
    """
    resource = ip_address = user_agent = None
    if has_request_context():
        resource = request.path
        ip_address = request.remote_addr
        user_agent = (request.headers.get("User-Agent") or "")[:512] or None

    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action[:128] if action else action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to write security event %s", event_type)
        return None

    return event

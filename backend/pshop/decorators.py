# Overview: Request decorators for API routes.

from functools import wraps

from flask import g, request

from .errors import UnauthenticatedError
from .responses import fail
from .services import session_service


def get_request_token() -> str | None:
    """
    Session token from the ``sessionId`` query parameter, the
    ``X-Session-Id`` header, or an ``Authorization: Bearer`` header.
    """
    token = request.args.get("sessionId") or request.headers.get("X-Session-Id")
    if token:
        return token.strip()

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def require_session(f):
    """
    Require a valid session and establish tenant context.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.user_id: The tenant id every data query is filtered by
    - g.session_token: The raw token of this request

    Returns 401 if the token is missing, unknown or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_request_token()
        if not token:
            return fail(UnauthenticatedError("Session required"))

        context = session_service.find_valid_session(token)
        if context is None:
            return fail(UnauthenticatedError("Invalid or expired session"))

        g.current_user = context.user
        g.user_id = context.user.id
        g.session_token = token

        return f(*args, **kwargs)

    return decorated_function

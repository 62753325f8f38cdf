# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/pshop/routes/auth.py
"""
Authentication API

Single endpoint dispatched on ``?action=``:

    POST /api/auth?action=login           {username, password}
    POST /api/auth?action=register        {username, password, adminCode}
    POST /api/auth?action=reset-password  {username, newPassword, adminCode}
    GET|POST /api/auth?action=logout
    GET|POST /api/auth?action=check-session
    GET /api/auth?action=has-users

The session token travels in the ``sessionId`` query parameter or the
``X-Session-Id`` header.
"""

from flask import Blueprint, current_app, request
from werkzeug.exceptions import HTTPException

from ..decorators import get_request_token
from ..errors import ApiError, InternalError, UnauthenticatedError, ValidationError
from ..extensions import db
from ..responses import fail, ok
from ..schemas import LoginRequest, RegisterRequest, ResetPasswordRequest
from ..services import auth_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _json_body():
    return request.get_json(silent=True)


def login_action():
    data = LoginRequest.from_payload(_json_body())
    result = auth_service.login(data.username, data.password)
    return ok(result.to_dict(), message="Login successful")


def register_action():
    data = RegisterRequest.from_payload(_json_body())
    result = auth_service.register(data.username, data.password, data.admin_code)
    if result.session is None:
        return ok(result.to_dict(), message="Account created. Please log in.")
    return ok(result.to_dict(), message="Account created. You are now logged in.")


def reset_password_action():
    data = ResetPasswordRequest.from_payload(_json_body())
    auth_service.reset_password(data.username, data.new_password, data.admin_code)
    return ok(message="Password reset. You can now log in.")


def logout_action():
    auth_service.logout(get_request_token())
    return ok(message="Logged out")


def check_session_action():
    check = auth_service.check_session(get_request_token())
    if not check.authenticated:
        return fail(UnauthenticatedError("Invalid or expired session"), data=check.to_dict())
    return ok(check.to_dict())


def has_users_action():
    return ok({"hasUsers": auth_service.has_any_user()})


POST_ACTIONS = {
    "login": login_action,
    "register": register_action,
    "reset-password": reset_password_action,
    "logout": logout_action,
    "check-session": check_session_action,
}

GET_ACTIONS = {
    "logout": logout_action,
    "check-session": check_session_action,
    "has-users": has_users_action,
}


@auth_bp.route("/auth", methods=["GET", "POST"])
def auth_route():
    action = request.args.get("action", "")
    actions = POST_ACTIONS if request.method == "POST" else GET_ACTIONS
    handler = actions.get(action)
    if handler is None:
        return fail(ValidationError("Invalid action"))

    try:
        return handler()
    except ApiError as e:
        db.session.rollback()
        return fail(e)
    except HTTPException:
        db.session.rollback()
        raise
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Auth action %s failed", action)
        return fail(InternalError())

# Overview: JSON envelope helpers shared by every blueprint.

from __future__ import annotations

from typing import Any

from flask import jsonify

from .errors import ApiError


def ok(data: Any = None, message: str | None = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(error: ApiError, data: Any = None):
    body = error.to_dict()
    if data is not None:
        body["data"] = data
    return jsonify(body), error.status_code

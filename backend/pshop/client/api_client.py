# backend/pshop/client/api_client.py
"""
HTTP client for the pshop API.

One ApiClient holds at most one ClientSession; the token is sent in the
X-Session-Id header. Every call returns the envelope's ``data`` and
raises ApiClientError when the server answers ``success: false``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .session import ClientSession

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiClientError(Exception):
    """Server-side or transport failure. ``kind`` mirrors the API error code."""

    def __init__(self, kind: str, status: int, message: str):
        self.kind = kind
        self.status = status
        self.message = message
        super().__init__(f"{kind} ({status}): {message}")


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
        session: Optional[ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- transport ---

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.session is not None:
            headers["X-Session-Id"] = self.session.id
        return headers

    def _send(self, method: str, path: str, params: Optional[dict] = None, json: Any = None) -> httpx.Response:
        try:
            return self.client.request(method, path, params=params, json=json, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiClientError("network", 0, str(e)) from e

    @staticmethod
    def _envelope(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            raise ApiClientError("internal", response.status_code, response.text[:200] or "Invalid response")
        if not isinstance(body, dict):
            raise ApiClientError("internal", response.status_code, "Invalid response")
        return body

    def _request(self, method: str, path: str, params: Optional[dict] = None, json: Any = None) -> Any:
        response = self._send(method, path, params=params, json=json)
        body = self._envelope(response)
        if response.is_error or not body.get("success"):
            raise ApiClientError(
                body.get("error") or "internal",
                response.status_code,
                body.get("message") or response.reason_phrase,
            )
        return body.get("data")

    def _auth(self, method: str, action: str, json: Any = None) -> Any:
        return self._request(method, "/api/auth", params={"action": action}, json=json)

    def _data(self, method: str, resource: str, entity_id: Optional[str] = None, json: Any = None) -> Any:
        params = {"resource": resource}
        if entity_id is not None:
            params["id"] = entity_id
        return self._request(method, "/api/data", params=params, json=json)

    def _adopt_session(self, data: dict) -> Optional[ClientSession]:
        payload = data.get("session") if data else None
        self.session = ClientSession.from_dict(payload) if payload else None
        return self.session

    # --- auth ---

    def login(self, username: str, password: str) -> ClientSession:
        data = self._auth("POST", "login", {"username": username, "password": password})
        return self._adopt_session(data)

    def register(self, username: str, password: str, admin_code: str) -> Optional[ClientSession]:
        """Returns None when the account was created but no session was opened."""
        data = self._auth("POST", "register", {
            "username": username,
            "password": password,
            "adminCode": admin_code,
        })
        return self._adopt_session(data)

    def reset_password(self, username: str, new_password: str, admin_code: str) -> None:
        self._auth("POST", "reset-password", {
            "username": username,
            "newPassword": new_password,
            "adminCode": admin_code,
        })

    def logout(self) -> None:
        if self.session is None:
            return
        try:
            self._auth("POST", "logout")
        finally:
            self.session = None

    def check_session(self) -> bool:
        if self.session is None:
            return False
        try:
            self._auth("GET", "check-session")
        except ApiClientError as e:
            if e.kind != "unauthenticated":
                raise
            self.session = None
            return False
        return True

    def has_users(self) -> bool:
        return bool(self._auth("GET", "has-users")["hasUsers"])

    # --- products ---

    def list_products(self) -> list[dict]:
        return self._data("GET", "products")

    def get_product(self, product_id: str) -> dict:
        return self._data("GET", "products", product_id)

    def create_product(self, payload: dict) -> dict:
        return self._data("POST", "products", json=payload)

    def update_product(self, product_id: str, payload: dict) -> dict:
        return self._data("PUT", "products", product_id, json=payload)

    def delete_product(self, product_id: str) -> None:
        self._data("DELETE", "products", product_id)

    # --- sales & expenses ---

    def list_sales(self) -> list[dict]:
        return self._data("GET", "sales")

    def create_sale(self, payload: dict) -> dict:
        return self._data("POST", "sales", json=payload)

    def list_expenses(self) -> list[dict]:
        return self._data("GET", "expenses")

    def create_expense(self, payload: dict) -> dict:
        return self._data("POST", "expenses", json=payload)

    def delete_expense(self, expense_id: str) -> None:
        self._data("DELETE", "expenses", expense_id)

    # --- theme & stats ---

    def get_theme(self) -> Optional[dict]:
        return self._data("GET", "theme")

    def save_theme(self, payload: dict) -> dict:
        return self._data("POST", "theme", json=payload)

    def get_stats(self) -> dict:
        return self._data("GET", "stats")

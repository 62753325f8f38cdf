# backend/pshop/client/stores.py
"""
Data store port used by front ends.

RemoteStore talks to the API; LocalStore keeps the same entity shapes in
a JSON file for offline use. LocalStore runs the server's own input
schemas and pure helpers (photo filtering, derived money fields, stats
aggregation) so both backends apply the same business rules.

Both raise ApiClientError on failure.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional

from ..errors import ApiError, NotFoundError, PayloadTooLargeError, ValidationError
from ..identifiers import new_id
from ..payloads import (
    MIN_STORED_PHOTO_LENGTH,
    clean_photos,
    compute_margin,
    compute_sale_amounts,
    encode_photos,
    to_money,
)
from ..schemas import ExpenseInput, ProductInput, SaleInput, ThemeInput
from ..services.stats_service import ExpenseRecord, SaleRecord, compute_stats
from pshop.time_utils import parse_iso_datetime, to_utc_z, utcnow
from .api_client import DEFAULT_TIMEOUT, ApiClient, ApiClientError
from .session import ClientSession

logger = logging.getLogger(__name__)

LOCAL_USER_ID = "local"


class DataStore(ABC):
    @abstractmethod
    def list_products(self) -> list[dict]: ...

    @abstractmethod
    def get_product(self, product_id: str) -> dict: ...

    @abstractmethod
    def save_product(self, payload: dict, product_id: Optional[str] = None) -> dict:
        """Create when ``product_id`` is None, otherwise replace that product."""

    @abstractmethod
    def delete_product(self, product_id: str) -> None: ...

    @abstractmethod
    def list_sales(self) -> list[dict]: ...

    @abstractmethod
    def record_sale(self, payload: dict) -> dict: ...

    @abstractmethod
    def list_expenses(self) -> list[dict]: ...

    @abstractmethod
    def record_expense(self, payload: dict) -> dict: ...

    @abstractmethod
    def delete_expense(self, expense_id: str) -> None: ...

    @abstractmethod
    def load_theme(self) -> Optional[dict]: ...

    @abstractmethod
    def save_theme(self, payload: dict) -> dict: ...

    @abstractmethod
    def stats(self) -> dict: ...


class RemoteStore(DataStore):
    def __init__(self, client: ApiClient):
        self.client = client

    def list_products(self) -> list[dict]:
        return self.client.list_products()

    def get_product(self, product_id: str) -> dict:
        return self.client.get_product(product_id)

    def save_product(self, payload: dict, product_id: Optional[str] = None) -> dict:
        if product_id is None:
            return self.client.create_product(payload)["product"]
        return self.client.update_product(product_id, payload)["product"]

    def delete_product(self, product_id: str) -> None:
        self.client.delete_product(product_id)

    def list_sales(self) -> list[dict]:
        return self.client.list_sales()

    def record_sale(self, payload: dict) -> dict:
        return self.client.create_sale(payload)["sale"]

    def list_expenses(self) -> list[dict]:
        return self.client.list_expenses()

    def record_expense(self, payload: dict) -> dict:
        return self.client.create_expense(payload)["expense"]

    def delete_expense(self, expense_id: str) -> None:
        self.client.delete_expense(expense_id)

    def load_theme(self) -> Optional[dict]:
        return self.client.get_theme()

    def save_theme(self, payload: dict) -> dict:
        return self.client.save_theme(payload)

    def stats(self) -> dict:
        return self.client.get_stats()


def _client_error(error: ApiError) -> ApiClientError:
    return ApiClientError(error.kind, error.status_code, error.message)


class LocalStore(DataStore):
    """
    Single-user store persisted to one JSON file.

    The whole document is rewritten on every change through a temp file
    and ``os.replace``, so a crash never leaves a half-written file.
    """

    def __init__(
        self,
        path: str,
        min_photo_length: int = 100,
        max_photos_bytes: int = 16 * 1024 * 1024,
    ):
        self.path = path
        self.min_photo_length = min_photo_length
        self.max_photos_bytes = max_photos_bytes

    # --- persistence ---

    def _load(self) -> dict:
        document = {"products": [], "sales": [], "expenses": [], "theme": None}
        if not os.path.exists(self.path):
            return document
        with open(self.path, "r", encoding="utf-8") as fh:
            try:
                stored = json.load(fh)
            except ValueError as e:
                raise ApiClientError("internal", 500, f"Local data file is corrupt: {e}")
        if isinstance(stored, dict):
            document.update({k: v for k, v in stored.items() if k in document})
        return document

    def _save(self, document: dict) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".pshop-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _find(rows: list[dict], entity_id: str, label: str) -> dict:
        for row in rows:
            if row.get("id") == entity_id:
                return row
        raise _client_error(NotFoundError(f"{label} not found"))

    # --- products ---

    @staticmethod
    def _present_product(row: dict) -> dict:
        product = dict(row)
        photos = product.get("photos")
        product["photos"] = clean_photos(photos, MIN_STORED_PHOTO_LENGTH) if isinstance(photos, list) else []
        if not isinstance(product.get("specifications"), dict):
            product["specifications"] = {}
        return product

    def list_products(self) -> list[dict]:
        rows = sorted(self._load()["products"], key=lambda p: p.get("id", ""))
        rows.sort(key=lambda p: p.get("createdAt") or "", reverse=True)
        return [self._present_product(row) for row in rows]

    def get_product(self, product_id: str) -> dict:
        return self._present_product(self._find(self._load()["products"], product_id, "Product"))

    def save_product(self, payload: dict, product_id: Optional[str] = None) -> dict:
        try:
            data = ProductInput.from_payload(payload)
        except ApiError as e:
            raise _client_error(e)

        photos = clean_photos(data.photos, self.min_photo_length)
        if len(encode_photos(photos).encode("utf-8")) > self.max_photos_bytes:
            raise _client_error(PayloadTooLargeError("Photos are too large"))

        document = self._load()
        now = to_utc_z(utcnow())
        if product_id is None:
            row = {"id": new_id("product"), "userId": LOCAL_USER_ID, "createdAt": now}
            document["products"].append(row)
        else:
            row = self._find(document["products"], product_id, "Product")

        row.update({
            "name": data.name,
            "description": data.description,
            "category": data.category,
            "partnerPrice": float(to_money(data.partner_price)),
            "resalePrice": float(to_money(data.resale_price)),
            "margin": float(compute_margin(data.partner_price, data.resale_price)),
            "stock": data.stock,
            "photos": photos,
            "specifications": dict(data.specifications),
            "updatedAt": now,
        })
        self._save(document)
        return self._present_product(row)

    def delete_product(self, product_id: str) -> None:
        document = self._load()
        row = self._find(document["products"], product_id, "Product")
        document["products"].remove(row)
        self._save(document)

    # --- sales ---

    def list_sales(self) -> list[dict]:
        rows = sorted(self._load()["sales"], key=lambda s: s.get("createdAt") or "", reverse=True)
        rows.sort(key=lambda s: s.get("saleDate") or "", reverse=True)
        return rows

    def record_sale(self, payload: dict) -> dict:
        try:
            data = SaleInput.from_payload(payload)
        except ApiError as e:
            raise _client_error(e)

        document = self._load()
        product = None
        if data.product_id:
            product = next((p for p in document["products"] if p.get("id") == data.product_id), None)
            if product is None:
                logger.warning("Sale references unknown local product %s", data.product_id)
                if not data.product_name:
                    raise _client_error(ValidationError("productName is required when the product does not exist"))

        unit_price, total, profit = compute_sale_amounts(
            quantity=data.quantity,
            unit_price=data.unit_price,
            advisory_total=data.total,
            advisory_profit=data.profit,
            partner_price=Decimal(str(product["partnerPrice"])) if product is not None else None,
        )

        sale = {
            "id": new_id("sale"),
            "userId": LOCAL_USER_ID,
            "productId": product["id"] if product is not None else None,
            "productName": data.product_name or (product["name"] if product is not None else ""),
            "quantity": data.quantity,
            "unitPrice": float(unit_price),
            "total": float(total),
            "profit": float(profit),
            "clientName": data.client_name,
            "clientPhone": data.client_phone,
            "saleDate": to_utc_z(data.sale_date),
            "createdAt": to_utc_z(utcnow()),
        }
        document["sales"].append(sale)
        if product is not None:
            product["stock"] = max(0, int(product.get("stock", 0)) - data.quantity)
            product["updatedAt"] = sale["createdAt"]
        self._save(document)
        return sale

    # --- expenses ---

    def list_expenses(self) -> list[dict]:
        rows = sorted(self._load()["expenses"], key=lambda e: e.get("createdAt") or "", reverse=True)
        rows.sort(key=lambda e: e.get("expenseDate") or "", reverse=True)
        return rows

    def record_expense(self, payload: dict) -> dict:
        try:
            data = ExpenseInput.from_payload(payload)
        except ApiError as e:
            raise _client_error(e)

        expense = {
            "id": new_id("expense"),
            "userId": LOCAL_USER_ID,
            "amount": float(to_money(data.amount)),
            "category": data.category,
            "supplier": data.supplier,
            "description": data.description,
            "expenseDate": to_utc_z(data.expense_date),
            "createdAt": to_utc_z(utcnow()),
        }
        document = self._load()
        document["expenses"].append(expense)
        self._save(document)
        return expense

    def delete_expense(self, expense_id: str) -> None:
        document = self._load()
        row = self._find(document["expenses"], expense_id, "Expense")
        document["expenses"].remove(row)
        self._save(document)

    # --- theme & stats ---

    def load_theme(self) -> Optional[dict]:
        return self._load()["theme"]

    def save_theme(self, payload: dict) -> dict:
        try:
            data = ThemeInput.from_payload(payload)
        except ApiError as e:
            raise _client_error(e)

        theme = {"colors": dict(data.colors), "mode": data.mode, "updatedAt": to_utc_z(utcnow())}
        document = self._load()
        document["theme"] = theme
        self._save(document)
        return theme

    def stats(self) -> dict:
        document = self._load()
        sales = [
            SaleRecord(
                sale_date=parse_iso_datetime(s["saleDate"]),
                total=Decimal(str(s["total"])),
                profit=Decimal(str(s["profit"])),
                quantity=int(s["quantity"]),
            )
            for s in document["sales"]
        ]
        expenses = [
            ExpenseRecord(
                expense_date=parse_iso_datetime(e["expenseDate"]),
                amount=Decimal(str(e["amount"])),
            )
            for e in document["expenses"]
        ]
        return compute_stats(sales, expenses, today=utcnow().date()).to_dict()


def open_store(
    base_url: Optional[str] = None,
    *,
    session: Optional[ClientSession] = None,
    path: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Any = None,
) -> DataStore:
    """
    Pick the backend: the API when ``base_url`` is given, else the JSON
    file at ``path``.
    """
    if base_url:
        return RemoteStore(ApiClient(base_url, timeout=timeout, transport=transport, session=session))
    if path:
        return LocalStore(path)
    raise ValueError("open_store needs either base_url or path")

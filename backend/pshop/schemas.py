# Overview: Typed request bodies, one per endpoint, validated at the boundary.

"""
Request schemas.

Each ``from_payload`` takes the decoded JSON body, rejects unknown and
missing fields, and returns a frozen dataclass with coerced values.
Length rules that belong to the auth policy (minimum username/password
length) are enforced by auth_service, not here.

Derived fields a client may send (``margin`` on products, ``total`` and
``profit`` on sales) are accepted but only advisory: the services
recompute them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from .errors import ValidationError
from .validation import (
    check_fields,
    coerce_datetime,
    coerce_int,
    coerce_money,
    coerce_str,
    coerce_str_map,
    require_object,
)
from pshop.time_utils import utcnow

THEME_MODES = ("light", "dark")


@dataclass(frozen=True)
class LoginRequest:
    username: str
    password: str

    @classmethod
    def from_payload(cls, payload: Any) -> "LoginRequest":
        data = require_object(payload)
        check_fields(data, allowed={"username", "password"}, required={"username", "password"})
        return cls(
            username=coerce_str("username", data["username"]),
            password=coerce_str("password", data["password"], strip=False),
        )


@dataclass(frozen=True)
class RegisterRequest:
    username: str
    password: str
    admin_code: str

    @classmethod
    def from_payload(cls, payload: Any) -> "RegisterRequest":
        data = require_object(payload)
        fields = {"username", "password", "adminCode"}
        check_fields(data, allowed=fields, required=fields)
        return cls(
            username=coerce_str("username", data["username"]),
            password=coerce_str("password", data["password"], strip=False),
            admin_code=coerce_str("adminCode", data["adminCode"]),
        )


@dataclass(frozen=True)
class ResetPasswordRequest:
    username: str
    new_password: str
    admin_code: str

    @classmethod
    def from_payload(cls, payload: Any) -> "ResetPasswordRequest":
        data = require_object(payload)
        fields = {"username", "newPassword", "adminCode"}
        check_fields(data, allowed=fields, required=fields)
        return cls(
            username=coerce_str("username", data["username"]),
            new_password=coerce_str("newPassword", data["newPassword"], strip=False),
            admin_code=coerce_str("adminCode", data["adminCode"]),
        )


@dataclass(frozen=True)
class ProductInput:
    name: str
    partner_price: Decimal
    resale_price: Decimal
    description: str = ""
    category: str = ""
    stock: int = 0
    photos: list = field(default_factory=list)
    specifications: dict = field(default_factory=dict)

    ALLOWED = frozenset({
        "name", "description", "category", "partnerPrice", "resalePrice",
        "margin", "stock", "photos", "specifications",
    })
    REQUIRED = frozenset({"name", "partnerPrice", "resalePrice"})

    @classmethod
    def from_payload(cls, payload: Any) -> "ProductInput":
        data = require_object(payload)
        check_fields(data, allowed=set(cls.ALLOWED), required=set(cls.REQUIRED))

        partner_price = coerce_money("partnerPrice", data["partnerPrice"])
        resale_price = coerce_money("resalePrice", data["resalePrice"])
        if partner_price < 0 or resale_price < 0:
            raise ValidationError("Prices must not be negative")
        if "margin" in data and data["margin"] is not None:
            coerce_money("margin", data["margin"])

        stock = coerce_int("stock", data["stock"]) if data.get("stock") is not None else 0
        if stock < 0:
            raise ValidationError("stock must not be negative")

        photos = data.get("photos")
        if photos is None:
            photos = []
        elif not isinstance(photos, list):
            raise ValidationError("photos must be an array")

        return cls(
            name=coerce_str("name", data["name"], max_length=255),
            description=coerce_str("description", data.get("description"), max_length=20000),
            category=coerce_str("category", data.get("category"), max_length=100),
            partner_price=partner_price,
            resale_price=resale_price,
            stock=stock,
            photos=list(photos),
            specifications=coerce_str_map("specifications", data.get("specifications"), max_length=1000),
        )


@dataclass(frozen=True)
class SaleInput:
    quantity: int
    sale_date: datetime
    product_id: str | None = None
    product_name: str = ""
    unit_price: Decimal | None = None
    total: Decimal | None = None
    profit: Decimal | None = None
    client_name: str = ""
    client_phone: str = ""

    ALLOWED = frozenset({
        "productId", "productName", "quantity", "unitPrice", "total", "profit",
        "clientName", "clientPhone", "saleDate",
    })

    @classmethod
    def from_payload(cls, payload: Any) -> "SaleInput":
        data = require_object(payload)
        check_fields(data, allowed=set(cls.ALLOWED), required={"quantity"})

        quantity = coerce_int("quantity", data["quantity"])
        if quantity <= 0:
            raise ValidationError("quantity must be greater than 0")

        def optional_money(key: str) -> Decimal | None:
            if data.get(key) is None:
                return None
            return coerce_money(key, data[key])

        unit_price = optional_money("unitPrice")
        if unit_price is not None and unit_price < 0:
            raise ValidationError("unitPrice must not be negative")
        total = optional_money("total")
        if total is not None and total < 0:
            raise ValidationError("total must not be negative")

        product_id = coerce_str("productId", data.get("productId"), max_length=64) or None
        product_name = coerce_str("productName", data.get("productName"), max_length=255)
        if product_id is None and not product_name:
            raise ValidationError("productName is required when no productId is given")

        return cls(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
            profit=optional_money("profit"),
            client_name=coerce_str("clientName", data.get("clientName"), max_length=255),
            client_phone=coerce_str("clientPhone", data.get("clientPhone"), max_length=50),
            sale_date=coerce_datetime("saleDate", data.get("saleDate"), default=utcnow()),
        )


@dataclass(frozen=True)
class ExpenseInput:
    amount: Decimal
    category: str
    expense_date: datetime
    supplier: str = ""
    description: str = ""

    ALLOWED = frozenset({"amount", "category", "supplier", "description", "expenseDate"})

    @classmethod
    def from_payload(cls, payload: Any) -> "ExpenseInput":
        data = require_object(payload)
        check_fields(data, allowed=set(cls.ALLOWED), required={"amount", "category"})

        amount = coerce_money("amount", data["amount"])
        if amount <= 0:
            raise ValidationError("amount must be greater than 0")

        return cls(
            amount=amount,
            category=coerce_str("category", data["category"], max_length=100),
            supplier=coerce_str("supplier", data.get("supplier"), max_length=255),
            description=coerce_str("description", data.get("description"), max_length=20000),
            expense_date=coerce_datetime("expenseDate", data.get("expenseDate"), default=utcnow()),
        )


@dataclass(frozen=True)
class ThemeInput:
    colors: dict
    mode: str = "light"

    @classmethod
    def from_payload(cls, payload: Any) -> "ThemeInput":
        data = require_object(payload)
        check_fields(data, allowed={"colors", "mode"}, required=set())

        mode = coerce_str("mode", data.get("mode"), default="light") or "light"
        if mode not in THEME_MODES:
            raise ValidationError("mode must be 'light' or 'dark'")

        return cls(
            colors=coerce_str_map("colors", data.get("colors"), max_length=64),
            mode=mode,
        )

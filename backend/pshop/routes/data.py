# Overview: Flask API routes for tenant data; dispatches on ?resource= and returns JSON envelopes.

# backend/pshop/routes/data.py
"""
Tenant data API

    GET    /api/data?resource=products|sales|expenses|theme|stats
    GET    /api/data?resource=products&id=...
    POST   /api/data?resource=products|sales|expenses|theme
    PUT    /api/data?resource=products&id=...
    DELETE /api/data?resource=products|expenses&id=...

SECURITY: Every route requires a valid session. All reads and writes are
scoped to g.user_id; rows of other users answer 404.
"""

from flask import Blueprint, current_app, g, request
from werkzeug.exceptions import HTTPException

from ..decorators import require_session
from ..errors import ApiError, InternalError, ValidationError
from ..extensions import db
from ..responses import fail, ok
from ..schemas import ExpenseInput, ProductInput, SaleInput, ThemeInput
from ..services import (
    expenses_service,
    products_service,
    sales_service,
    stats_service,
    theme_service,
)

data_bp = Blueprint("data", __name__, url_prefix="/api")


def _json_body():
    return request.get_json(silent=True)


def _entity_id() -> str:
    return request.args.get("id", "").strip()


# === PRODUCTS ===

def get_products():
    product_id = _entity_id()
    if product_id:
        return ok(products_service.get_product(g.user_id, product_id).to_dict())
    return ok(products_service.list_products(g.user_id))


def post_product():
    data = ProductInput.from_payload(_json_body())
    product, photos_count = products_service.create_product(g.user_id, data)
    return ok(
        {"id": product.id, "photosCount": photos_count, "product": product.to_dict()},
        message="Product created",
    )


def put_product():
    product_id = _entity_id()
    # Ownership first: a foreign id is 404 whatever the body holds
    products_service.get_product(g.user_id, product_id)
    data = ProductInput.from_payload(_json_body())
    product, photos_count = products_service.update_product(g.user_id, product_id, data)
    return ok(
        {"id": product.id, "photosCount": photos_count, "product": product.to_dict()},
        message="Product updated",
    )


def delete_product():
    products_service.delete_product(g.user_id, _entity_id())
    return ok(message="Product deleted")


# === SALES ===

def get_sales():
    return ok(sales_service.list_sales(g.user_id))


def post_sale():
    data = SaleInput.from_payload(_json_body())
    sale = sales_service.create_sale(g.user_id, data)
    return ok({"id": sale.id, "sale": sale.to_dict()}, message="Sale recorded")


# === EXPENSES ===

def get_expenses():
    return ok(expenses_service.list_expenses(g.user_id))


def post_expense():
    data = ExpenseInput.from_payload(_json_body())
    expense = expenses_service.create_expense(g.user_id, data)
    return ok({"id": expense.id, "expense": expense.to_dict()}, message="Expense recorded")


def delete_expense():
    expenses_service.delete_expense(g.user_id, _entity_id())
    return ok(message="Expense deleted")


# === THEME ===

def get_theme():
    theme = theme_service.get_theme(g.user_id)
    # success with null data when the user never saved a theme
    return ok(theme.to_dict() if theme else None)


def post_theme():
    data = ThemeInput.from_payload(_json_body())
    theme = theme_service.save_theme(g.user_id, data)
    return ok(theme.to_dict(), message="Theme saved")


# === STATS ===

def get_stats():
    return ok(stats_service.get_stats(g.user_id).to_dict())


HANDLERS = {
    ("GET", "products"): get_products,
    ("GET", "sales"): get_sales,
    ("GET", "expenses"): get_expenses,
    ("GET", "theme"): get_theme,
    ("GET", "stats"): get_stats,
    ("POST", "products"): post_product,
    ("POST", "sales"): post_sale,
    ("POST", "expenses"): post_expense,
    ("POST", "theme"): post_theme,
    ("PUT", "products"): put_product,
    ("DELETE", "products"): delete_product,
    ("DELETE", "expenses"): delete_expense,
}


@data_bp.route("/data", methods=["GET", "POST", "PUT", "DELETE"])
@require_session
def data_route():
    resource = request.args.get("resource", "")
    handler = HANDLERS.get((request.method, resource))
    if handler is None:
        return fail(ValidationError("Invalid resource"))

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
        current_app.logger.exception("Data request %s %s failed", request.method, resource)
        return fail(InternalError())

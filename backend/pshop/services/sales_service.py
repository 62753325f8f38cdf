# Overview: Service-layer operations for sales; records a sale and moves stock in one transaction.

from __future__ import annotations

from sqlalchemy import case, update

from flask import current_app

from ..errors import ValidationError
from ..extensions import db
from ..models import Product, Sale
from ..payloads import compute_sale_amounts
from ..schemas import SaleInput
from .concurrency import lock_for_update
from .tenant_service import scoped_query
from pshop.time_utils import utcnow


def list_sales(user_id: str) -> list[dict]:
    sales = (
        scoped_query(Sale, user_id)
        .order_by(Sale.sale_date.desc(), Sale.created_at.desc())
        .all()
    )
    return [s.to_dict() for s in sales]


def create_sale(user_id: str, data: SaleInput) -> Sale:
    """
    Record a sale and decrement the product's stock.

    The product lookup is best-effort: a productId that does not resolve
    within the caller's tenant does not fail the sale, it is recorded
    without a product link and then needs its own productName. Stock never
    goes below zero; an oversell is clamped and logged.

    Both writes share one commit, so a failure leaves neither applied.
    """
    product = None
    if data.product_id:
        product = lock_for_update(
            scoped_query(Product, user_id).filter(Product.id == data.product_id)
        ).first()
        if product is None:
            current_app.logger.warning(
                "Sale references unknown product %s for user %s", data.product_id, user_id
            )
            if not data.product_name:
                raise ValidationError("productName is required when the product does not exist")

    unit_price, total, profit = compute_sale_amounts(
        quantity=data.quantity,
        unit_price=data.unit_price,
        advisory_total=data.total,
        advisory_profit=data.profit,
        partner_price=product.partner_price if product is not None else None,
    )

    sale = Sale(
        user_id=user_id,
        product_id=product.id if product is not None else None,
        product_name=data.product_name or (product.name if product is not None else ""),
        quantity=data.quantity,
        unit_price=unit_price,
        total=total,
        profit=profit,
        client_name=data.client_name,
        client_phone=data.client_phone,
        sale_date=data.sale_date,
        created_at=utcnow(),
    )

    try:
        db.session.add(sale)
        if product is not None:
            if data.quantity > product.stock:
                current_app.logger.warning(
                    "Sale of %d exceeds stock %d for product %s; clamping to 0",
                    data.quantity, product.stock, product.id,
                )
            db.session.execute(
                update(Product)
                .where(Product.id == product.id, Product.user_id == user_id)
                .values(
                    stock=case(
                        (Product.stock >= data.quantity, Product.stock - data.quantity),
                        else_=0,
                    ),
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return sale

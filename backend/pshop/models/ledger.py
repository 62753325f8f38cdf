from __future__ import annotations

from ..extensions import db
from ..identifiers import new_id
from pshop.time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    Recorded sale.

    ``product_id`` is a soft reference (no foreign key): the product may be
    deleted later while the sale stays in the books. ``product_name`` is the
    snapshot shown in listings.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_user_sale_date", "user_id", "sale_date"),
    )

    id = db.Column(db.String(64), primary_key=True, default=lambda: new_id("sale"))
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.String(64), nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(15, 2), nullable=False)
    total = db.Column(db.Numeric(15, 2), nullable=False)
    profit = db.Column(db.Numeric(15, 2), nullable=False)
    client_name = db.Column(db.String(255), nullable=True)
    client_phone = db.Column(db.String(50), nullable=True)
    sale_date = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": int(self.quantity),
            "unitPrice": float(self.unit_price),
            "total": float(self.total),
            "profit": float(self.profit),
            "clientName": self.client_name or "",
            "clientPhone": self.client_phone or "",
            "saleDate": to_utc_z(self.sale_date),
            "createdAt": to_utc_z(self.created_at),
        }


class Expense(db.Model):
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_user_expense_date", "user_id", "expense_date"),
    )

    id = db.Column(db.String(64), primary_key=True, default=lambda: new_id("expense"))
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = db.Column(db.Numeric(15, 2), nullable=False)
    category = db.Column(db.String(100), nullable=False, index=True)
    supplier = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    expense_date = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "amount": float(self.amount),
            "category": self.category,
            "supplier": self.supplier or "",
            "description": self.description or "",
            "expenseDate": to_utc_z(self.expense_date),
            "createdAt": to_utc_z(self.created_at),
        }

from __future__ import annotations

from ..extensions import db
from ..models import Expense
from ..payloads import to_money
from ..schemas import ExpenseInput
from .tenant_service import require_owned, scoped_query
from pshop.time_utils import utcnow


def list_expenses(user_id: str) -> list[dict]:
    expenses = (
        scoped_query(Expense, user_id)
        .order_by(Expense.expense_date.desc(), Expense.created_at.desc())
        .all()
    )
    return [e.to_dict() for e in expenses]


def create_expense(user_id: str, data: ExpenseInput) -> Expense:
    expense = Expense(
        user_id=user_id,
        amount=to_money(data.amount),
        category=data.category,
        supplier=data.supplier,
        description=data.description,
        expense_date=data.expense_date,
        created_at=utcnow(),
    )
    db.session.add(expense)
    db.session.commit()
    return expense


def delete_expense(user_id: str, expense_id: str) -> None:
    expense = require_owned(Expense, expense_id, user_id, label="Expense")
    db.session.delete(expense)
    db.session.commit()

# Overview: Revenue/profit/expense rollups derived from a user's sales and expenses.

"""
Stats Aggregator

``compute_stats`` is a pure function of the sales and expenses collections
and of "today"; it is shared by the server (get_stats) and the offline
LocalStore so both produce identical numbers.

- lifetime totals over all rows
- current calendar month (year and month of ``today``, not a rolling 30 days)
- a 7-entry daily series ending today, oldest first, zero-filled
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, NamedTuple

from ..extensions import db
from ..models import Expense, Sale
from pshop.time_utils import utcnow

SERIES_DAYS = 7
ZERO = Decimal("0")


class SaleRecord(NamedTuple):
    sale_date: datetime
    total: Decimal
    profit: Decimal
    quantity: int


class ExpenseRecord(NamedTuple):
    expense_date: datetime
    amount: Decimal


@dataclass
class DailyPoint:
    date: date
    sales_revenue: Decimal = ZERO
    profit: Decimal = ZERO
    expenses_amount: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "salesRevenue": float(self.sales_revenue),
            "profit": float(self.profit),
            "expensesAmount": float(self.expenses_amount),
        }


@dataclass
class Totals:
    sales_count: int = 0
    revenue: Decimal = ZERO
    profit: Decimal = ZERO
    items_sold: int = 0
    expenses_count: int = 0
    expenses_amount: Decimal = ZERO

    @property
    def net_profit(self) -> Decimal:
        return self.profit - self.expenses_amount

    def add_sale(self, sale: SaleRecord) -> None:
        self.sales_count += 1
        self.revenue += Decimal(sale.total)
        self.profit += Decimal(sale.profit)
        self.items_sold += int(sale.quantity)

    def add_expense(self, expense: ExpenseRecord) -> None:
        self.expenses_count += 1
        self.expenses_amount += Decimal(expense.amount)


@dataclass
class Stats:
    lifetime: Totals
    month: Totals
    last_7_days: list[DailyPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalSales": self.lifetime.sales_count,
            "totalRevenue": float(self.lifetime.revenue),
            "totalProfit": float(self.lifetime.profit),
            "totalItemsSold": self.lifetime.items_sold,
            "totalExpenses": self.lifetime.expenses_count,
            "totalExpensesAmount": float(self.lifetime.expenses_amount),
            "netProfit": float(self.lifetime.net_profit),
            "monthSales": self.month.sales_count,
            "monthRevenue": float(self.month.revenue),
            "monthProfit": float(self.month.profit),
            "monthItemsSold": self.month.items_sold,
            "monthExpenses": self.month.expenses_count,
            "monthExpensesAmount": float(self.month.expenses_amount),
            "monthNetProfit": float(self.month.net_profit),
            "last7Days": [point.to_dict() for point in self.last_7_days],
        }


def _same_month(day: date, today: date) -> bool:
    return day.year == today.year and day.month == today.month


def compute_stats(
    sales: Iterable[SaleRecord],
    expenses: Iterable[ExpenseRecord],
    today: date,
) -> Stats:
    lifetime = Totals()
    month = Totals()
    series = {
        today - timedelta(days=offset): DailyPoint(date=today - timedelta(days=offset))
        for offset in range(SERIES_DAYS - 1, -1, -1)
    }

    for sale in sales:
        day = sale.sale_date.date()
        lifetime.add_sale(sale)
        if _same_month(day, today):
            month.add_sale(sale)
        point = series.get(day)
        if point is not None:
            point.sales_revenue += Decimal(sale.total)
            point.profit += Decimal(sale.profit)

    for expense in expenses:
        day = expense.expense_date.date()
        lifetime.add_expense(expense)
        if _same_month(day, today):
            month.add_expense(expense)
        point = series.get(day)
        if point is not None:
            point.expenses_amount += Decimal(expense.amount)

    return Stats(
        lifetime=lifetime,
        month=month,
        last_7_days=sorted(series.values(), key=lambda p: p.date),
    )


def get_stats(user_id: str) -> Stats:
    sales = db.session.query(
        Sale.sale_date, Sale.total, Sale.profit, Sale.quantity
    ).filter(Sale.user_id == user_id).all()
    expenses = db.session.query(
        Expense.expense_date, Expense.amount
    ).filter(Expense.user_id == user_id).all()

    return compute_stats(
        (SaleRecord(*row) for row in sales),
        (ExpenseRecord(*row) for row in expenses),
        today=utcnow().date(),
    )

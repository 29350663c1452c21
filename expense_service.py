"""
Expense service layer.

Business logic on top of the database:
- typed expense filters and the conjunction built from them;
- expense-by-category listing with exact amounts for transport;
- the dashboard metrics bundle.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import and_, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from db import (
    ExpenseByCategory,
    ExpenseSummary,
    PurchaseSummary,
    SalesSummary,
    latest_expense_summaries,
    latest_expenses_by_category,
    latest_purchase_summaries,
    latest_sales_summaries,
    list_expenses_by_category,
    popular_products,
)
from inventory_service import serialize_product


ALL_CATEGORIES = "All"


def parse_date(value: str | None) -> dt.date | None:
    """
    Parses an ISO date or timestamp into a calendar date.

    Missing and blank values mean "no constraint" and give None. Anything else
    that is not ISO raises ValueError.
    """
    if value is None or not value.strip():
        return None
    return dt.datetime.fromisoformat(value.strip()).date()


@dataclass(frozen=True)
class ExpenseFilter:
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    category: str | None = None

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "ExpenseFilter":
        category = query.get("category") or None
        return cls(
            start_date=parse_date(query.get("startDate")),
            end_date=parse_date(query.get("endDate")),
            category=category,
        )

    def where_clause(self) -> ColumnElement[bool]:
        """AND of every constraint that is set; an empty filter matches everything."""
        clauses: list[ColumnElement[bool]] = []
        if self.start_date is not None:
            clauses.append(ExpenseByCategory.date >= self.start_date)
        if self.end_date is not None:
            clauses.append(ExpenseByCategory.date <= self.end_date)
        if self.category and self.category != ALL_CATEGORIES:
            clauses.append(ExpenseByCategory.category == self.category)
        return and_(true(), *clauses)

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.start_date is not None:
            params["startDate"] = self.start_date.isoformat()
        if self.end_date is not None:
            params["endDate"] = self.end_date.isoformat()
        if self.category:
            params["category"] = self.category
        return params


def _isoformat(value: dt.date | dt.datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_expense_by_category(item: ExpenseByCategory) -> dict[str, Any]:
    return {
        "expenseByCategoryId": item.expense_by_category_id,
        "expenseSummaryId": item.expense_summary_id,
        "date": _isoformat(item.date),
        "category": item.category,
        "amount": str(item.amount),
    }


def serialize_sales_summary(item: SalesSummary) -> dict[str, Any]:
    return {
        "salesSummaryId": item.sales_summary_id,
        "totalValue": item.total_value,
        "changePercentage": item.change_percentage,
        "date": _isoformat(item.date),
    }


def serialize_purchase_summary(item: PurchaseSummary) -> dict[str, Any]:
    return {
        "purchaseSummaryId": item.purchase_summary_id,
        "totalPurchased": item.total_purchased,
        "changePercentage": item.change_percentage,
        "date": _isoformat(item.date),
    }


def serialize_expense_summary(item: ExpenseSummary) -> dict[str, Any]:
    return {
        "expenseSummaryId": item.expense_summary_id,
        "totalExpenses": item.total_expenses,
        "date": _isoformat(item.date),
    }


async def get_expenses_by_category(session: AsyncSession, filters: ExpenseFilter) -> list[dict[str, Any]]:
    """Matching expense rows, newest first, amounts as exact decimal strings."""
    rows = await list_expenses_by_category(session, filters.where_clause())
    return [serialize_expense_by_category(row) for row in rows]


async def get_dashboard_metrics(session: AsyncSession) -> dict[str, list[dict[str, Any]]]:
    products = await popular_products(session, limit=15)
    sales = await latest_sales_summaries(session, limit=5)
    purchases = await latest_purchase_summaries(session, limit=5)
    expenses = await latest_expense_summaries(session, limit=5)
    by_category = await latest_expenses_by_category(session, limit=5)
    return {
        "popularProducts": [serialize_product(p) for p in products],
        "salesSummary": [serialize_sales_summary(s) for s in sales],
        "purchaseSummary": [serialize_purchase_summary(p) for p in purchases],
        "expenseSummary": [serialize_expense_summary(e) for e in expenses],
        "expenseByCategorySummary": [serialize_expense_by_category(e) for e in by_category],
    }

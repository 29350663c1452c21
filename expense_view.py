"""
Expense breakdown view.

Filters fetched expenses by category and date range, sums them per category
and hands the totals to the pie chart.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from charts import render_pie_chart
from dashboard_client import ExpenseByCategorySummary, ExpensesQuery
from expense_service import ALL_CATEGORIES, ExpenseFilter


CATEGORY_COLORS: dict[str, str] = {
    ALL_CATEGORIES: "#8884d8",
    "Office": "#82ca9d",
    "Professional": "#ffc658",
    "Salaries": "#d0ed57",
}
DEFAULT_COLOR = "#000000"

LOADING_MESSAGE = "Loading data..."
ERROR_MESSAGE = "Failed to load expense data. Please try again later."


@dataclass
class AggregatedCategoryTotal:
    name: str
    amount: Decimal
    color: str = DEFAULT_COLOR


def aggregate_expenses(
    expenses: Iterable[ExpenseByCategorySummary],
    selected_category: str = ALL_CATEGORIES,
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
) -> list[AggregatedCategoryTotal]:
    """
    Sums amounts per category over the expenses that pass the filter.

    The date range only applies when both ends are set; both ends are
    inclusive. Totals come out in the order categories are first seen.
    """
    totals: dict[str, AggregatedCategoryTotal] = {}
    for expense in expenses:
        if selected_category != ALL_CATEGORIES and expense.category != selected_category:
            continue
        if start_date and end_date and not (start_date <= expense.date <= end_date):
            continue

        entry = totals.get(expense.category)
        if entry is None:
            totals[expense.category] = AggregatedCategoryTotal(
                name=expense.category,
                amount=Decimal(expense.amount),
                color=CATEGORY_COLORS.get(expense.category, DEFAULT_COLOR),
            )
        else:
            entry.amount += Decimal(expense.amount)
    return list(totals.values())


@dataclass
class ViewState:
    status: str
    message: str | None = None
    totals: list[AggregatedCategoryTotal] = field(default_factory=list)
    chart: bytes | None = None


class ExpensesView:
    def __init__(self, query: ExpensesQuery) -> None:
        self.query = query
        self.selected_category = ALL_CATEGORIES
        self.start_date: dt.date | None = None
        self.end_date: dt.date | None = None
        self.active_index = 0

    @staticmethod
    def category_options() -> list[str]:
        return list(CATEGORY_COLORS)

    def set_category(self, category: str) -> None:
        self.selected_category = category or ALL_CATEGORIES

    def set_date_range(self, start_date: dt.date | None, end_date: dt.date | None) -> None:
        self.start_date = start_date
        self.end_date = end_date

    def reset_filters(self) -> None:
        self.selected_category = ALL_CATEGORIES
        self.start_date = None
        self.end_date = None

    def current_filter(self) -> ExpenseFilter:
        return ExpenseFilter(
            start_date=self.start_date,
            end_date=self.end_date,
            category=self.selected_category,
        )

    async def refresh(self, server_side: bool = False) -> None:
        """Refetches expenses, optionally narrowing them on the server first."""
        await self.query.fetch(self.current_filter() if server_side else None)

    @property
    def aggregated(self) -> list[AggregatedCategoryTotal]:
        return aggregate_expenses(
            self.query.data or [],
            selected_category=self.selected_category,
            start_date=self.start_date,
            end_date=self.end_date,
        )

    def render(self) -> ViewState:
        if self.query.is_loading:
            return ViewState(status="loading", message=LOADING_MESSAGE)
        if self.query.is_error or self.query.data is None:
            return ViewState(status="error", message=ERROR_MESSAGE)

        totals = self.aggregated
        return ViewState(
            status="ready",
            totals=totals,
            chart=render_pie_chart(totals, active_index=self.active_index),
        )

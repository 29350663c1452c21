"""
Client for the expense API.

ExpensesQuery mirrors a data-fetching hook: it exposes ``data``,
``is_loading`` and ``is_error`` for the view layer, and a newer fetch cancels
one that is still running.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

import aiohttp

from expense_service import ExpenseFilter


logger = logging.getLogger(__name__)

EXPENSES_PATH = "/expenses/category"


@dataclass(frozen=True)
class ExpenseByCategorySummary:
    date: dt.date
    category: str
    amount: Decimal
    expense_by_category_id: str | None = None

    @classmethod
    def from_json(cls, item: Mapping[str, Any]) -> "ExpenseByCategorySummary":
        """Raises ValueError for a missing date or an amount that is not a decimal."""
        try:
            amount = Decimal(str(item["amount"]))
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {item['amount']!r}") from e
        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {item['amount']!r}")
        return cls(
            date=dt.datetime.fromisoformat(str(item["date"])).date(),
            category=str(item["category"]),
            amount=amount,
            expense_by_category_id=item.get("expenseByCategoryId"),
        )


class ExpensesQuery:
    def __init__(self, session: aiohttp.ClientSession, base_url: str = "") -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._task: asyncio.Task | None = None
        self.data: list[ExpenseByCategorySummary] | None = None
        self.is_loading = False
        self.is_error = False

    async def fetch(self, filters: ExpenseFilter | None = None) -> list[ExpenseByCategorySummary] | None:
        """
        Loads expenses, replacing ``data``.

        Returns None when the fetch failed or was superseded by a newer one.
        """
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling superseded expenses fetch")
            self._task.cancel()

        params = filters.to_params() if filters is not None else {}
        task = asyncio.ensure_future(self._load(params))
        self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._task is not task:
                return None
            raise

    async def _load(self, params: dict[str, str]) -> list[ExpenseByCategorySummary] | None:
        self.is_loading = True
        self.is_error = False
        try:
            async with self._session.get(self._base_url + EXPENSES_PATH, params=params) as resp:
                resp.raise_for_status()
                payload = await resp.json()
            if not isinstance(payload, list):
                raise ValueError("expected a list of expenses")
            data = [ExpenseByCategorySummary.from_json(item) for item in payload]
        except asyncio.CancelledError:
            # A superseded fetch leaves the state to the newer one.
            if self._task is asyncio.current_task():
                logger.warning("Expenses fetch cancelled")
                self.data = None
                self.is_error = True
                self.is_loading = False
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, KeyError, TypeError):
            logger.exception("Failed to load expenses")
            self.data = None
            self.is_error = True
            self.is_loading = False
            return None

        self.data = data
        self.is_loading = False
        return data

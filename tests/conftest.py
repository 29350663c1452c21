import datetime as dt
from decimal import Decimal

import pytest

from api import DB_KEY, create_app
from app_config import Settings
from db import ExpenseByCategory, add_all


EXPENSE_ROWS = [
    ("2024-01-05", "Office", "100"),
    ("2024-02-10", "Office", "50"),
    ("2024-01-20", "Salaries", "200"),
    ("2024-03-01", "Professional", "75.25"),
]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        db_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        db_echo=False,
        host="127.0.0.1",
        port=0,
        log_level="DEBUG",
    )


@pytest.fixture
async def client(aiohttp_client, settings):
    return await aiohttp_client(create_app(settings))


@pytest.fixture
async def seeded_client(client):
    rows = [
        ExpenseByCategory(category=category, amount=Decimal(amount), date=dt.date.fromisoformat(day))
        for day, category, amount in EXPENSE_ROWS
    ]
    async with client.app[DB_KEY].session() as session:
        await add_all(session, rows)
    return client

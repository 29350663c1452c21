from __future__ import annotations

import datetime as dt
import logging
import uuid
from decimal import Decimal
from typing import Sequence

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, Numeric, String, func, select
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.elements import ColumnElement


logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(AsyncAttrs, DeclarativeBase):
    pass


class Product(Base):
    __tablename__ = "products"

    product_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    price: Mapped[float] = mapped_column(Float)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    stock_quantity: Mapped[int] = mapped_column(Integer, index=True)


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))


class SalesSummary(Base):
    __tablename__ = "sales_summary"

    sales_summary_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    total_value: Mapped[float] = mapped_column(Float)
    change_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


class PurchaseSummary(Base):
    __tablename__ = "purchase_summary"

    purchase_summary_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    total_purchased: Mapped[float] = mapped_column(Float)
    change_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


class ExpenseSummary(Base):
    __tablename__ = "expense_summary"

    expense_summary_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    total_expenses: Mapped[float] = mapped_column(Float)
    date: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


class ExpenseByCategory(Base):
    __tablename__ = "expense_by_category"

    expense_by_category_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    expense_summary_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("expense_summary.expense_summary_id"), nullable=True
    )
    category: Mapped[str] = mapped_column(String(100), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    date: Mapped[dt.date] = mapped_column(Date, index=True)


class Database:
    """Owns the engine and session factory for one application lifetime."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.engine = create_async_engine(url, echo=echo)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    async def init(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready at %s", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")


async def list_expenses_by_category(
    session: AsyncSession, where: ColumnElement[bool] | None = None
) -> list[ExpenseByCategory]:
    stmt = select(ExpenseByCategory)
    if where is not None:
        stmt = stmt.where(where)
    res = await session.execute(
        stmt.order_by(ExpenseByCategory.date.desc(), ExpenseByCategory.expense_by_category_id)
    )
    return list(res.scalars().all())


async def latest_expenses_by_category(session: AsyncSession, limit: int = 5) -> list[ExpenseByCategory]:
    res = await session.execute(
        select(ExpenseByCategory).order_by(ExpenseByCategory.date.desc()).limit(limit)
    )
    return list(res.scalars().all())


async def popular_products(session: AsyncSession, limit: int = 15) -> list[Product]:
    res = await session.execute(select(Product).order_by(Product.stock_quantity.desc()).limit(limit))
    return list(res.scalars().all())


async def latest_sales_summaries(session: AsyncSession, limit: int = 5) -> list[SalesSummary]:
    res = await session.execute(select(SalesSummary).order_by(SalesSummary.date.desc()).limit(limit))
    return list(res.scalars().all())


async def latest_purchase_summaries(session: AsyncSession, limit: int = 5) -> list[PurchaseSummary]:
    res = await session.execute(select(PurchaseSummary).order_by(PurchaseSummary.date.desc()).limit(limit))
    return list(res.scalars().all())


async def latest_expense_summaries(session: AsyncSession, limit: int = 5) -> list[ExpenseSummary]:
    res = await session.execute(select(ExpenseSummary).order_by(ExpenseSummary.date.desc()).limit(limit))
    return list(res.scalars().all())


async def list_products(session: AsyncSession, search: str | None = None) -> list[Product]:
    stmt = select(Product)
    if search:
        stmt = stmt.where(Product.name.contains(search))
    res = await session.execute(stmt.order_by(Product.name))
    return list(res.scalars().all())


async def add_product(
    session: AsyncSession,
    name: str,
    price: float,
    stock_quantity: int,
    rating: float | None = None,
    product_id: str | None = None,
) -> Product:
    product = Product(
        product_id=product_id or _new_id(),
        name=name,
        price=price,
        rating=rating,
        stock_quantity=stock_quantity,
    )
    session.add(product)
    await session.commit()
    await session.refresh(product)
    return product


async def list_users(session: AsyncSession) -> list[User]:
    res = await session.execute(select(User).order_by(User.name))
    return list(res.scalars().all())


async def add_all(session: AsyncSession, rows: Sequence[Base]) -> None:
    session.add_all(rows)
    await session.commit()

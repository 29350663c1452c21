"""Products and users on top of the database."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from db import Product, User, add_product, list_products, list_users


def serialize_product(item: Product) -> dict[str, Any]:
    return {
        "productId": item.product_id,
        "name": item.name,
        "price": item.price,
        "rating": item.rating,
        "stockQuantity": item.stock_quantity,
    }


def serialize_user(item: User) -> dict[str, Any]:
    return {"userId": item.user_id, "name": item.name, "email": item.email}


async def search_products(session: AsyncSession, search: str | None = None) -> list[dict[str, Any]]:
    products = await list_products(session, search=(search or "").strip() or None)
    return [serialize_product(p) for p in products]


async def create_product(session: AsyncSession, payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Creates a product from a request body.

    Raises KeyError for a missing required field and ValueError/TypeError for
    values that cannot be coerced.
    """
    rating = payload.get("rating")
    product = await add_product(
        session,
        product_id=payload.get("productId") or None,
        name=str(payload["name"]).strip(),
        price=float(payload["price"]),
        rating=float(rating) if rating is not None else None,
        stock_quantity=int(payload["stockQuantity"]),
    )
    return serialize_product(product)


async def get_users(session: AsyncSession) -> list[dict[str, Any]]:
    return [serialize_user(u) for u in await list_users(session)]

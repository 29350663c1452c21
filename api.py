from __future__ import annotations

import logging
from typing import AsyncIterator

from aiohttp import web
from sqlalchemy.exc import SQLAlchemyError

from app_config import Settings
from db import Database
from expense_service import ExpenseFilter, get_dashboard_metrics, get_expenses_by_category
from inventory_service import create_product, get_users, search_products


logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", Settings)
DB_KEY = web.AppKey("db", Database)

routes = web.RouteTableDef()


def _error(message: str) -> web.Response:
    return web.json_response({"message": message}, status=500)


@routes.get("/expenses/category")
async def expenses_by_category(request: web.Request) -> web.Response:
    try:
        filters = ExpenseFilter.from_query(request.query)
        async with request.app[DB_KEY].session() as session:
            items = await get_expenses_by_category(session, filters)
    except (SQLAlchemyError, ValueError):
        logger.exception("Error fetching expenses by category")
        return _error("Error retrieving expenses by category")
    return web.json_response(items)


@routes.get("/dashboard")
async def dashboard_metrics(request: web.Request) -> web.Response:
    try:
        async with request.app[DB_KEY].session() as session:
            metrics = await get_dashboard_metrics(session)
    except SQLAlchemyError:
        logger.exception("Error fetching dashboard metrics")
        return _error("Error retrieving dashboard metrics")
    return web.json_response(metrics)


@routes.get("/products")
async def products(request: web.Request) -> web.Response:
    try:
        async with request.app[DB_KEY].session() as session:
            items = await search_products(session, request.query.get("search"))
    except SQLAlchemyError:
        logger.exception("Error fetching products")
        return _error("Error retrieving products")
    return web.json_response(items)


@routes.post("/products")
async def new_product(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise TypeError("product payload must be an object")
        async with request.app[DB_KEY].session() as session:
            product = await create_product(session, payload)
    except (SQLAlchemyError, KeyError, ValueError, TypeError):
        logger.exception("Error creating product")
        return _error("Error creating product")
    logger.info("Created product %s", product["productId"])
    return web.json_response(product, status=201)


@routes.get("/users")
async def users(request: web.Request) -> web.Response:
    try:
        async with request.app[DB_KEY].session() as session:
            items = await get_users(session)
    except SQLAlchemyError:
        logger.exception("Error fetching users")
        return _error("Error retrieving users")
    return web.json_response(items)


async def database_ctx(app: web.Application) -> AsyncIterator[None]:
    settings = app[SETTINGS_KEY]
    db = Database(settings.db_url, echo=settings.db_echo)
    await db.init()
    app[DB_KEY] = db
    yield
    await db.dispose()


def create_app(settings: Settings) -> web.Application:
    app = web.Application()
    app[SETTINGS_KEY] = settings
    app.cleanup_ctx.append(database_ctx)
    app.add_routes(routes)
    return app

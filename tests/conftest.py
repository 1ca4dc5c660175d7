"""
tests.conftest

Shared fixtures.

Responsibilities:
- Provide a file-backed SQLite database per test (bounded QueuePool applies to files).
- Provide a migrated pool, both `OrderStore` adapters, and an in-process HTTP client.
"""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio

from petstore_orders.api.app import create_app
from petstore_orders.db.migrate import migrate
from petstore_orders.db.pool import PoolConfig, open_pool
from petstore_orders.db.repositories import InMemoryOrderRepo, SqlOrderRepo
from petstore_orders.domain import Order, OrderStatus
from petstore_orders.settings import Settings

SHIP_DATE = datetime(2024, 8, 14, 23, 22, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
def settings(db_url: str) -> Settings:
    return Settings(env="test", storage="sql", database_url=db_url, log_level="WARNING")


@pytest_asyncio.fixture
async def pool(db_url: str):
    pool = await open_pool(PoolConfig(db_url=db_url))
    await migrate(pool)
    try:
        yield pool
    finally:
        await pool.close()


@pytest_asyncio.fixture(params=["sql", "memory"])
async def store(request, db_url: str):
    # Every repository test runs against both adapters.
    if request.param == "memory":
        yield InMemoryOrderRepo()
        return

    pool = await open_pool(PoolConfig(db_url=db_url))
    await migrate(pool)
    try:
        yield SqlOrderRepo(pool)
    finally:
        await pool.close()


@pytest_asyncio.fixture
async def app(settings: Settings):
    app = create_app(settings=settings)

    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


def make_order(
    id: int = 1,
    *,
    user_id: int = 0,
    pet_id: int = 0,
    quantity: int = 32,
    ship_date: datetime | None = SHIP_DATE,
    status: OrderStatus = OrderStatus.approved,
) -> Order:
    return Order(
        id=id,
        user_id=user_id,
        pet_id=pet_id,
        quantity=quantity,
        ship_date=ship_date,
        status=status,
    )

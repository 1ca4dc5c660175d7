from __future__ import annotations

import asyncio
import time
from contextlib import AsyncExitStack

import pytest
from sqlalchemy import text

from petstore_orders.db.pool import PoolConfig, open_pool
from petstore_orders.errors import DatabaseConnectionError
from petstore_orders.settings import DbSettings, Settings


@pytest.mark.asyncio
async def test_open_validates_reachability(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url))
    try:
        assert pool.dialect_name == "sqlite"
        async with pool.connect() as conn:
            assert (await conn.execute(text("SELECT 1"))).scalar_one() == 1
        assert pool.in_use == 0
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_checkout_returns_connection_to_pool(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url))
    try:
        for _ in range(3):
            async with pool.connect() as conn:
                await conn.execute(text("SELECT 1"))
                assert pool.engine.pool.checkedout() == 1
            assert pool.engine.pool.checkedout() == 0

        with pytest.raises(RuntimeError):
            async with pool.connect():
                raise RuntimeError("boom")
        assert pool.engine.pool.checkedout() == 0
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_open_unreachable_database_raises(tmp_path) -> None:
    url = f"sqlite+aiosqlite:///{tmp_path / 'no' / 'such' / 'dir.db'}"
    with pytest.raises(DatabaseConnectionError):
        await open_pool(PoolConfig(db_url=url))


@pytest.mark.asyncio
async def test_open_invalid_url_raises() -> None:
    with pytest.raises(DatabaseConnectionError):
        await open_pool(PoolConfig(db_url="nosuchdialect://localhost/db"))


@pytest.mark.asyncio
async def test_checkout_beyond_max_connections_times_out(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url, max_connections=5, acquire_timeout=0.3))
    try:
        async with AsyncExitStack() as stack:
            for _ in range(5):
                await stack.enter_async_context(pool.connect())
            assert pool.in_use == 5

            started = time.monotonic()
            with pytest.raises(DatabaseConnectionError):
                async with pool.connect():
                    pass
            elapsed = time.monotonic() - started

        assert 0.25 <= elapsed < 5
        assert pool.in_use == 0

        # Capacity is back once the holders return their connections.
        async with pool.connect():
            pass
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_concurrent_excess_checkouts_fail_instead_of_hanging(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url, max_connections=5, acquire_timeout=0.3))

    async def hold() -> None:
        async with pool.connect():
            await asyncio.sleep(0.8)

    try:
        results = await asyncio.wait_for(
            asyncio.gather(*(hold() for _ in range(7)), return_exceptions=True),
            timeout=5,
        )
    finally:
        await pool.close()

    failures = [r for r in results if isinstance(r, DatabaseConnectionError)]
    assert len(failures) == 2
    assert sum(r is None for r in results) == 5


@pytest.mark.asyncio
async def test_close_is_idempotent_and_rejects_new_checkouts(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url))
    await pool.close()
    await pool.close()
    assert pool.closed

    with pytest.raises(DatabaseConnectionError):
        async with pool.connect():
            pass


@pytest.mark.asyncio
async def test_close_waits_for_in_flight_checkouts(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url))
    release = asyncio.Event()
    acquired = asyncio.Event()

    async def hold() -> None:
        async with pool.connect() as conn:
            acquired.set()
            await release.wait()
            await conn.execute(text("SELECT 1"))

    holder = asyncio.create_task(hold())
    await acquired.wait()

    closer = asyncio.create_task(pool.close())
    await asyncio.sleep(0.05)
    assert not closer.done()
    assert not pool.closed

    release.set()
    await holder
    await asyncio.wait_for(closer, timeout=5)
    assert pool.closed


@pytest.mark.asyncio
async def test_cancelled_checkout_returns_connection(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url, max_connections=1))
    acquired = asyncio.Event()

    async def hold_forever() -> None:
        async with pool.connect():
            acquired.set()
            await asyncio.Event().wait()

    try:
        task = asyncio.create_task(hold_forever())
        await acquired.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert pool.in_use == 0
        # The single connection is available again.
        async with pool.connect():
            pass
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_idle_connections_are_replaced_after_idle_timeout(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url, max_connections=1, idle_timeout=0.05))
    try:
        async with pool.connect() as conn:
            first = (await conn.get_raw_connection()).dbapi_connection
        await asyncio.sleep(0.15)
        async with pool.connect() as conn:
            second = (await conn.get_raw_connection()).dbapi_connection
        assert first is not second
    finally:
        await pool.close()


@pytest.mark.asyncio
async def test_connections_are_reused_without_idle_timeout(db_url: str) -> None:
    pool = await open_pool(PoolConfig(db_url=db_url, max_connections=1))
    try:
        async with pool.connect() as conn:
            first = (await conn.get_raw_connection()).dbapi_connection
        async with pool.connect() as conn:
            second = (await conn.get_raw_connection()).dbapi_connection
        assert first is second
    finally:
        await pool.close()


def test_pool_config_from_settings() -> None:
    settings = Settings(
        database_url="sqlite+aiosqlite:///x.db",
        db=DbSettings(max_connections=7, acquire_timeout_ms=250, max_lifetime_s=60.0),
    )
    cfg = PoolConfig.from_settings(settings)
    assert cfg.db_url == "sqlite+aiosqlite:///x.db"
    assert cfg.max_connections == 7
    assert cfg.acquire_timeout == pytest.approx(0.25)
    assert cfg.idle_timeout is None
    assert cfg.max_lifetime == 60.0
    assert "x.db" not in repr(cfg)

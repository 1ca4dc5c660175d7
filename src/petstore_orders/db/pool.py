"""
petstore_orders.db.pool

Connection pool lifecycle.

Responsibilities:
- Build a bounded async SQLAlchemy engine from `PoolConfig` and validate reachability.
- Lend connections/sessions (one checkout each) with a bounded acquire timeout.
- Drain in-flight checkouts and dispose the engine exactly once on shutdown.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import event, exc as sa_exc, text
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from petstore_orders.errors import DatabaseConnectionError
from petstore_orders.observability.logging import get_logger
from petstore_orders.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PoolConfig:
    db_url: str
    max_connections: int = 5
    # Seconds. None disables the idle / lifetime limits.
    acquire_timeout: float = 0.3
    idle_timeout: float | None = None
    max_lifetime: float | None = None
    echo: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> PoolConfig:
        return cls(
            db_url=settings.db_dsn,
            max_connections=settings.db.max_connections,
            acquire_timeout=settings.db.acquire_timeout_ms / 1000,
            idle_timeout=settings.db.idle_timeout_s,
            max_lifetime=settings.db.max_lifetime_s,
            echo=settings.db.echo,
        )

    def __repr__(self) -> str:
        # The URL may carry credentials.
        return (
            f"PoolConfig(max_connections={self.max_connections}, "
            f"acquire_timeout={self.acquire_timeout}, idle_timeout={self.idle_timeout}, "
            f"max_lifetime={self.max_lifetime})"
        )


class Pool:
    """
    Shared handle over a bounded connection pool.

    One instance per process. It is lent (never copied) to the migrator, the
    repositories and every request; each `connect()`/`session()` is one checkout.
    """

    def __init__(self, engine: AsyncEngine, config: PoolConfig) -> None:
        self._engine = engine
        self._config = config
        self._sessionmaker = async_sessionmaker(
            expire_on_commit=False,
            autoflush=False,
        )
        self._in_use = 0
        self._drained = asyncio.Event()
        self._drained.set()
        self._closing = False
        self._closed = False
        self._close_lock = asyncio.Lock()

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def closed(self) -> bool:
        return self._closed

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        """
        Check out one connection for the duration of the block.

        Raises `DatabaseConnectionError` if the pool is closing/closed, the
        database is unreachable, or no connection frees up within
        `acquire_timeout`. The connection is returned on exit, error, or
        cancellation.
        """

        if self._closing:
            raise DatabaseConnectionError("connection pool is closed")

        self._in_use += 1
        self._drained.clear()
        try:
            try:
                conn = await self._engine.connect()
            except sa_exc.TimeoutError as e:
                log.warning(
                    "pool_checkout_timeout",
                    max_connections=self._config.max_connections,
                    acquire_timeout=self._config.acquire_timeout,
                )
                raise DatabaseConnectionError(
                    f"no connection available within {self._config.acquire_timeout:.3f}s "
                    f"(max_connections={self._config.max_connections})"
                ) from e
            except (sa_exc.DBAPIError, OSError) as e:
                raise DatabaseConnectionError(f"database unreachable: {e}") from e

            try:
                yield conn
            finally:
                await conn.close()
        finally:
            self._in_use -= 1
            if self._in_use == 0:
                self._drained.set()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        # Session bound to a single checkout; commit/rollback is up to the caller.
        async with self.connect() as conn:
            async with self._sessionmaker(bind=conn) as session:
                yield session

    async def ping(self) -> None:
        async with self.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        """
        Stop lending connections, wait for in-flight checkouts, then dispose.
        Later calls return once the first close has finished.
        """

        self._closing = True
        async with self._close_lock:
            if self._closed:
                return
            if self._in_use:
                log.info("pool_draining", in_use=self._in_use)
            await self._drained.wait()
            await self._engine.dispose()
            self._closed = True
            log.info("pool_closed")


async def open_pool(config: PoolConfig) -> Pool:
    """
    Create the engine and validate reachability with one round trip.

    No other connections are opened eagerly; the pool grows on demand up to
    `max_connections`.
    """

    try:
        engine = create_async_engine(
            config.db_url,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=config.max_connections,
            max_overflow=0,
            pool_timeout=config.acquire_timeout,
            pool_recycle=config.max_lifetime if config.max_lifetime is not None else -1,
            pool_pre_ping=True,
            echo=config.echo,
        )
    except (sa_exc.ArgumentError, sa_exc.NoSuchModuleError) as e:
        raise DatabaseConnectionError(f"invalid database url: {e}") from e

    if config.idle_timeout is not None:
        _install_idle_timeout(engine, config.idle_timeout)

    pool = Pool(engine, config)
    try:
        await pool.ping()
    except BaseException:
        await engine.dispose()
        raise

    log.info(
        "pool_opened",
        url=engine.url.render_as_string(hide_password=True),
        max_connections=config.max_connections,
        acquire_timeout=config.acquire_timeout,
    )
    return pool


def _install_idle_timeout(engine: AsyncEngine, idle_timeout: float) -> None:
    # A pooled connection idle for longer than the limit is replaced on its next checkout.
    @event.listens_for(engine.sync_engine, "checkin")
    def _on_checkin(dbapi_connection, connection_record) -> None:
        if connection_record is not None:
            connection_record.info["checked_in_at"] = time.monotonic()

    @event.listens_for(engine.sync_engine, "checkout")
    def _on_checkout(dbapi_connection, connection_record, connection_proxy) -> None:
        checked_in_at = connection_record.info.pop("checked_in_at", None)
        if checked_in_at is not None and time.monotonic() - checked_in_at > idle_timeout:
            # The pool invalidates the record and retries with a fresh connection.
            raise sa_exc.DisconnectionError("connection exceeded idle timeout")


# --- Module Notes -----------------------------------------------------------
# `max_overflow=0` makes `max_connections` a hard bound: under saturation checkouts
# fail after `acquire_timeout` instead of queueing, which caps tail latency.

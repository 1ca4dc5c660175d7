"""
petstore_orders.state

Process-wide application state and its lifecycle.

Responsibilities:
- Select the storage adapter from settings.
- Sequence pool open -> migration for the SQL adapter (fail fast on either).
- Release the pool exactly once on shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass

from petstore_orders.db.migrate import migrate
from petstore_orders.db.pool import Pool, PoolConfig, open_pool
from petstore_orders.db.repositories import InMemoryOrderRepo, OrderStore, SqlOrderRepo
from petstore_orders.observability.logging import get_logger
from petstore_orders.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AppState:
    """
    Explicit context handed to every request through FastAPI dependencies.
    """

    orders: OrderStore
    version: str
    # Only the SQL adapter owns a pool.
    pool: Pool | None = None

    async def ready(self) -> None:
        if self.pool is not None:
            await self.pool.ping()

    async def shutdown(self) -> None:
        if self.pool is not None:
            await self.pool.close()


async def build_state(settings: Settings) -> AppState:
    if settings.storage == "memory":
        log.info("storage_selected", storage="memory")
        return AppState(orders=InMemoryOrderRepo(), version=settings.version)

    log.info("connecting_to_db")
    pool = await open_pool(PoolConfig.from_settings(settings))
    try:
        await migrate(pool)
    except BaseException:
        await pool.close()
        raise

    log.info("storage_selected", storage="sql", dialect=pool.dialect_name)
    return AppState(orders=SqlOrderRepo(pool), version=settings.version, pool=pool)


# --- Module Notes -----------------------------------------------------------
# The pool is owned here and only lent to the migrator and the repository.

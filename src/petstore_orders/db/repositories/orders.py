"""
petstore_orders.db.repositories.orders

Order repository over the shared connection pool.

Responsibilities:
- Declare the `OrderStore` capability used by services and routers.
- Implement it with single-statement SQL operations (`SqlOrderRepo`).
- Translate SQLAlchemy errors into the storage error taxonomy.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Protocol

from sqlalchemy import delete, exc as sa_exc, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from petstore_orders.db.models import OrderRecord
from petstore_orders.db.pool import Pool
from petstore_orders.domain import Order
from petstore_orders.errors import DatabaseConnectionError, QueryError, StorageError
from petstore_orders.observability.logging import get_logger

log = get_logger(__name__)

# Every column an upsert overwrites on conflict.
MUTABLE_COLUMNS = ("user_id", "pet_id", "quantity", "ship_date", "status")

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class OrderStore(Protocol):
    async def create(self, order: Order) -> None: ...

    async def get(self, order_id: int) -> Order | None: ...

    async def list_for_user(self, user_id: int) -> Sequence[Order]: ...

    async def update(self, order: Order) -> None: ...

    async def delete(self, order_id: int) -> None: ...


class SqlOrderRepo:
    """
    `OrderStore` backed by the relational database.

    Each call is one pool checkout running one statement; there are no internal
    retries and no application-level locking (concurrent upserts to the same id
    resolve last-write-wins in the database).
    """

    def __init__(self, pool: Pool) -> None:
        self._pool = pool

    async def create(self, order: Order) -> None:
        log.debug("order_create", order_id=order.id, user_id=order.user_id)
        async with self._session() as session:
            await session.execute(insert(OrderRecord).values(**_columns(order)))
            await session.commit()

    async def get(self, order_id: int) -> Order | None:
        log.debug("order_get", order_id=order_id)
        async with self._session() as session:
            record = await session.get(OrderRecord, order_id)
            return record.to_domain() if record is not None else None

    async def list_for_user(self, user_id: int) -> list[Order]:
        # Newest (highest id) first.
        log.debug("order_list", user_id=user_id)
        stmt = (
            select(OrderRecord)
            .where(OrderRecord.user_id == user_id)
            .order_by(OrderRecord.id.desc())
        )
        async with self._session() as session:
            records = (await session.scalars(stmt)).all()
            return [r.to_domain() for r in records]

    async def update(self, order: Order) -> None:
        """Insert the order, or overwrite every mutable column if the id exists."""

        log.debug("order_upsert", order_id=order.id, status=order.status.value)
        async with self._session() as session:
            await session.execute(_upsert_statement(self._pool.dialect_name, order))
            await session.commit()

    async def delete(self, order_id: int) -> None:
        # Deleting a missing id is not an error.
        async with self._session() as session:
            result = await session.execute(delete(OrderRecord).where(OrderRecord.id == order_id))
            deleted = result.rowcount
            await session.commit()
        log.debug("order_delete", order_id=order_id, deleted=deleted)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._pool.session() as session:
                yield session
        except StorageError:
            raise
        except sa_exc.DBAPIError as e:
            if e.connection_invalidated or isinstance(
                e, (sa_exc.OperationalError, sa_exc.InterfaceError)
            ):
                raise DatabaseConnectionError(f"database error: {e.orig}") from e
            raise QueryError(str(e.orig)) from e
        except sa_exc.SQLAlchemyError as e:
            raise QueryError(str(e)) from e


def _columns(order: Order) -> dict[str, Any]:
    return order.model_dump()


def _upsert_statement(dialect_name: str, order: Order):
    insert_for_dialect = _UPSERT_INSERTS.get(dialect_name)
    if insert_for_dialect is None:
        raise QueryError(f"upsert is not supported for dialect {dialect_name!r}")

    stmt = insert_for_dialect(OrderRecord).values(**_columns(order))
    return stmt.on_conflict_do_update(
        index_elements=[OrderRecord.id],
        set_={name: stmt.excluded[name] for name in MUTABLE_COLUMNS},
    )


# --- Module Notes -----------------------------------------------------------
# `update` is an upsert on purpose: one round trip, no existence check, and
# callers can retry it safely.

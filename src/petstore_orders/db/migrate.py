"""
petstore_orders.db.migrate

Schema migration bootstrap (Alembic, run programmatically).

Responsibilities:
- Apply all pending Alembic revisions through the shared pool at startup.
- Report the applied revision for diagnostics and tests.
- Turn any failure into `MigrationError` so startup aborts.
"""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Connection

from petstore_orders.db.pool import Pool
from petstore_orders.errors import MigrationError
from petstore_orders.observability.logging import get_logger

log = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def alembic_config(connection: Connection | None = None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        # Picked up by migrations/env.py instead of building its own engine.
        cfg.attributes["connection"] = connection
    return cfg


def _upgrade(connection: Connection, target: str) -> None:
    command.upgrade(alembic_config(connection), target)


def _current(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


async def migrate(pool: Pool, *, target: str = "head") -> None:
    """
    Apply every pending revision up to `target`.

    Revisions already recorded in `alembic_version` are skipped, so calling this
    on an up-to-date database is a no-op.
    """

    try:
        async with pool.connect() as conn:
            async with conn.begin():
                before = await conn.run_sync(_current)
                await conn.run_sync(_upgrade, target)
                after = await conn.run_sync(_current)
    except Exception as e:
        log.error("migration_failed", error=str(e))
        raise MigrationError(f"schema migration failed: {e}") from e

    if before == after:
        log.info("migrations_up_to_date", revision=after)
    else:
        log.info("migrations_applied", from_revision=before, to_revision=after)


async def current_revision(pool: Pool) -> str | None:
    async with pool.connect() as conn:
        return await conn.run_sync(_current)


# --- Module Notes -----------------------------------------------------------
# The same scripts run from the CLI (`alembic upgrade head`, see alembic.ini); both
# paths share `migrations/env.py`.

"""
petstore_orders.db.base

SQLAlchemy declarative base.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# Models register on `Base.metadata`; the schema itself is owned by the Alembic
# revisions under `petstore_orders/migrations`.

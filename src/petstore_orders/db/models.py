"""
petstore_orders.db.models

Persistence schema for orders.

Responsibilities:
- Define the `OrderRecord` ORM model mapped to the `orders` table.
- Store ship dates as UTC on every backend.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Enum, TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column

from petstore_orders.db.base import Base
from petstore_orders.domain import Order, OrderStatus


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC datetimes in and out.

    PostgreSQL keeps the offset (`timestamptz`); SQLite has no tz support, so
    values are written as naive UTC and re-tagged on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class OrderRecord(Base):
    __tablename__ = "orders"

    # Caller-supplied ids; no autoincrement contract.
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    pet_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ship_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status"), nullable=False
    )

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_orders_quantity_non_negative"),)

    def to_domain(self) -> Order:
        return Order.model_validate(self)


# --- Module Notes -----------------------------------------------------------
# Keep this mapping in sync with the latest Alembic revision; the test suite builds
# the schema through migrations, so drift shows up as failing repository tests.

"""
petstore_orders.db.repositories.memory

Dict-backed order store selected by `storage = "memory"`.

Responsibilities:
- Mirror `SqlOrderRepo` semantics (duplicate create fails, update upserts,
  delete ignores missing ids, list is id-descending) without a database.
"""

from __future__ import annotations

from petstore_orders.domain import Order
from petstore_orders.errors import QueryError
from petstore_orders.observability.logging import get_logger

log = get_logger(__name__)


class InMemoryOrderRepo:
    def __init__(self) -> None:
        self._orders: dict[int, Order] = {}

    async def create(self, order: Order) -> None:
        log.debug("order_create", order_id=order.id, user_id=order.user_id)
        if order.id in self._orders:
            raise QueryError(f"duplicate key: order {order.id} already exists")
        self._orders[order.id] = order

    async def get(self, order_id: int) -> Order | None:
        log.debug("order_get", order_id=order_id)
        return self._orders.get(order_id)

    async def list_for_user(self, user_id: int) -> list[Order]:
        log.debug("order_list", user_id=user_id)
        orders = [o for o in self._orders.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: o.id, reverse=True)

    async def update(self, order: Order) -> None:
        log.debug("order_upsert", order_id=order.id, status=order.status.value)
        self._orders[order.id] = order

    async def delete(self, order_id: int) -> None:
        deleted = self._orders.pop(order_id, None) is not None
        log.debug("order_delete", order_id=order_id, deleted=int(deleted))


# --- Module Notes -----------------------------------------------------------
# Orders are frozen pydantic models, so stored values cannot be mutated by callers;
# state is lost on restart.

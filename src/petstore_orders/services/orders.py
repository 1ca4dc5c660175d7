"""
petstore_orders.services.orders

Order helpers built on top of an `OrderStore`.

Responsibilities:
- Cancel an order (status overwrite through the upsert path).
- Report an order's current status.
"""

from __future__ import annotations

from petstore_orders.db.repositories.orders import OrderStore
from petstore_orders.domain import Order, OrderStatus
from petstore_orders.observability.logging import get_logger

log = get_logger(__name__)


class OrderService:
    def __init__(self, orders: OrderStore) -> None:
        self._orders = orders

    async def cancel(self, order_id: int) -> Order | None:
        """
        Mark an existing order as cancelled and return it; `None` if absent.

        Any status may be cancelled. The read and the write are separate calls,
        so a concurrent update between them is overwritten.
        """

        order = await self._orders.get(order_id)
        if order is None:
            return None
        cancelled = order.model_copy(update={"status": OrderStatus.cancelled})
        await self._orders.update(cancelled)
        log.info("order_cancelled", order_id=order_id, previous_status=order.status.value)
        return cancelled

    async def status(self, order_id: int) -> OrderStatus | None:
        order = await self._orders.get(order_id)
        return order.status if order is not None else None


# --- Module Notes -----------------------------------------------------------
# No transition rules are enforced here; the status enum is deliberately unordered.

"""
petstore_orders.api.routers.orders

Order endpoints.

Responsibilities:
- Map each route onto exactly one `OrderStore` (or `OrderService`) call.
- Translate `None` into 404; storage errors become 500 via the app-level handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Response
from starlette.status import HTTP_200_OK, HTTP_404_NOT_FOUND

from petstore_orders.api.deps import order_service, order_store
from petstore_orders.db.repositories import OrderStore
from petstore_orders.domain import MAX_ID, Order, OrderStatus
from petstore_orders.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

OrderId = Path(ge=0, le=MAX_ID, description="Order id")


@router.post("/")
async def create_order(order: Order, orders: OrderStore = Depends(order_store)) -> Response:
    await orders.create(order)
    return Response(status_code=HTTP_200_OK)


@router.get("/all/{user_id}", response_model=list[Order])
async def list_orders(
    user_id: int = Path(ge=0, le=MAX_ID), orders: OrderStore = Depends(order_store)
) -> list[Order]:
    return list(await orders.list_for_user(user_id))


@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: int = OrderId, orders: OrderStore = Depends(order_store)) -> Order:
    order = await orders.get(order_id)
    if order is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.post("/{order_id}")
async def update_order(
    order: Order, order_id: int = OrderId, orders: OrderStore = Depends(order_store)
) -> Response:
    # The path id wins over the body id.
    await orders.update(order.model_copy(update={"id": order_id}))
    return Response(status_code=HTTP_200_OK)


@router.delete("/{order_id}")
async def delete_order(
    order_id: int = OrderId, orders: OrderStore = Depends(order_store)
) -> Response:
    await orders.delete(order_id)
    return Response(status_code=HTTP_200_OK)


@router.post("/{order_id}/cancel", response_model=Order)
async def cancel_order(
    order_id: int = OrderId, service: OrderService = Depends(order_service)
) -> Order:
    order = await service.cancel(order_id)
    if order is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.get("/{order_id}/status")
async def order_status(
    order_id: int = OrderId, service: OrderService = Depends(order_service)
) -> dict[str, OrderStatus]:
    status = await service.status(order_id)
    if status is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Order not found")
    return {"status": status}


# --- Module Notes -----------------------------------------------------------
# `/all/{user_id}` is registered before `/{order_id}` so the literal segment is
# matched first.

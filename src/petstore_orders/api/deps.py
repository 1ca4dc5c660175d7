"""
petstore_orders.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the `AppState` built at startup to request handlers.
- Provide the order store and order service per request.
"""

from __future__ import annotations

from fastapi import Depends, Request

from petstore_orders.db.repositories import OrderStore
from petstore_orders.services.orders import OrderService
from petstore_orders.state import AppState


def app_state(request: Request) -> AppState:
    # Set by the lifespan in `petstore_orders.api.app.create_app`.
    return request.app.state.ctx  # type: ignore[attr-defined]


def order_store(state: AppState = Depends(app_state)) -> OrderStore:
    return state.orders


def order_service(orders: OrderStore = Depends(order_store)) -> OrderService:
    return OrderService(orders)

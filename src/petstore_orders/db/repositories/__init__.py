"""
petstore_orders.db.repositories

Repository package.

Responsibilities:
- Define the `OrderStore` capability and its storage adapters.
"""

from petstore_orders.db.repositories.memory import InMemoryOrderRepo
from petstore_orders.db.repositories.orders import OrderStore, SqlOrderRepo

__all__ = ["InMemoryOrderRepo", "OrderStore", "SqlOrderRepo"]


# --- Module Notes -----------------------------------------------------------
# Adapters share no base class; each one satisfies `OrderStore` structurally.

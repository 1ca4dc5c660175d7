"""
petstore_orders.services

Service-layer package.

Responsibilities:
- Order helpers composed from `OrderStore` operations.
"""

# Package marker.

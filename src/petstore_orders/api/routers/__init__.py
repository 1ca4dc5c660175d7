"""
petstore_orders.api.routers

HTTP routers.
"""

"""
petstore_orders.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide the connection pool, schema migrator, ORM models and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Adapters are selected at startup (`petstore_orders.state`); nothing outside this
# package imports SQLAlchemy directly.

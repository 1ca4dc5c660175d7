"""
petstore_orders.errors

Error taxonomy for the persistence layer.

Responsibilities:
- Give callers one base class (`StorageError`) to map to an HTTP 500.
- Distinguish connectivity, migration, and statement failures.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for every failure raised by the pool, migrator, or repositories."""


class DatabaseConnectionError(StorageError):
    """Database unreachable, pool closed, or checkout timed out."""


class MigrationError(StorageError):
    """A schema migration script failed; the service must not start."""


class QueryError(StorageError):
    """Constraint violation or malformed statement."""


# --- Module Notes -----------------------------------------------------------
# Request decoding errors are not part of this hierarchy: FastAPI rejects malformed
# bodies with 422 before a handler (and therefore a repository) is ever called.

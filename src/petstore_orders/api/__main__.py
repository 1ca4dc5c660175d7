"""
petstore_orders.api.__main__

`python -m petstore_orders.api` / `petstore-orders`: serve the Orders API with uvicorn.
"""

from __future__ import annotations

import uvicorn

from petstore_orders.api.app import create_app
from petstore_orders.settings import get_settings


def main() -> None:
    settings = get_settings()
    # uvicorn owns SIGINT/SIGTERM: it stops accepting, drains requests, then
    # runs the lifespan shutdown that closes the pool.
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()

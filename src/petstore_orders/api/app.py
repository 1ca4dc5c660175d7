"""
petstore_orders.api.app

FastAPI app factory for the Orders service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Run the startup sequence (pool -> migrations -> state) and shutdown (close pool).
- Map storage errors to HTTP 500 in one place.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from petstore_orders.api.routers.health import router as health_router
from petstore_orders.api.routers.orders import router as orders_router
from petstore_orders.errors import StorageError
from petstore_orders.observability.logging import configure_logging, get_logger
from petstore_orders.observability.middleware import RequestContextMiddleware
from petstore_orders.settings import Settings
from petstore_orders.state import build_state

log = get_logger(__name__)


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    log.error("storage_error", error_type=type(exc).__name__, error=str(exc))
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": type(exc).__name__},
    )


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, storage=settings.storage)
        # Connection or migration failures propagate and abort startup.
        state = await build_state(settings)
        app.state.ctx = state
        log.info("serving", version=state.version)
        try:
            yield
        finally:
            await state.shutdown()
            log.info("shutdown")

    app = FastAPI(
        title="Petstore Orders",
        version=settings.version,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.include_router(health_router, tags=["health"])
    app.include_router(orders_router)

    return app


# --- Module Notes -----------------------------------------------------------
# uvicorn stops accepting connections and waits for in-flight requests before the
# lifespan exits, so the pool is never closed under a running query.

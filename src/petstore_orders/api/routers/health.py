"""
petstore_orders.api.routers.health

Version, health and readiness endpoints.

Responsibilities:
- Report the service version (`/version`).
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from petstore_orders.api.deps import app_state
from petstore_orders.errors import DatabaseConnectionError
from petstore_orders.state import AppState

router = APIRouter()


@router.get("/version")
async def version(state: AppState = Depends(app_state)) -> str:
    return state.version


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(state: AppState = Depends(app_state)) -> dict[str, str]:
    # Readiness: one checkout + SELECT 1 through the shared pool.
    try:
        await state.ready()
    except DatabaseConnectionError as e:
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable"
        ) from e
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# /readyz answers 503 while the pool cannot hand out a connection within
# acquire_timeout, so a saturated instance drops out of load balancing.

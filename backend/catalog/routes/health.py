"""
Resource Catalog — Health Check and Greeting Routes
===================================================

What:  GET /health for probes, GET / as a plain-text greeting.
How:   /health pings the configured store. A store that cannot answer makes
       the service "unhealthy" (HTTP 503) so load balancers stop routing to it.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from catalog import __version__
from catalog.deps import get_store
from catalog.schemas import HealthResponse
from catalog.store import EntityStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()

GREETING = "Hello from Resource Catalog Service!"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(store: EntityStore = Depends(get_store)):
    """Probe the store with its lightweight ping."""
    store_status = "available"
    overall = "healthy"

    try:
        if not await store.ping():
            store_status = "unavailable"
            overall = "unhealthy"
    except Exception as e:
        store_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: store unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        store=store.name,
        store_status=store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return GREETING

"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK / load balancers
  - The front-end, to show whether real analysis is available

Returns 200 "healthy" when at least one API key is configured and 503
"degraded" otherwise. A degraded service still answers every analysis
with the fallback report, so callers can tell "API down" from
"API up but analysis is placeholder-only".
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pratyaksh.ai.dispatcher import AnalysisDispatcher, get_dispatcher
from pratyaksh.core.config import settings
from pratyaksh.services.file_storage import file_store

logger = logging.getLogger(__name__)
router = APIRouter()

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str               # "healthy" | "degraded"
    version: str
    environment: str
    provider: str
    configured_keys: int
    working_keys: int
    available_keys: int       # working keys not cooling down
    cooldowns: dict[str, dict]
    file_storage: dict[str, int]


_NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check(dispatcher: AnalysisDispatcher = Depends(get_dispatcher)):
    usable = dispatcher.pool.usable()
    available = [c for c in usable if dispatcher.tracker.is_available(c.identifier)]

    health = HealthResponse(
        status="healthy" if usable else "degraded",
        version=VERSION,
        environment=settings.environment,
        provider=dispatcher.client.name,
        configured_keys=len(dispatcher.pool),
        working_keys=len(usable),
        available_keys=len(available),
        cooldowns=dispatcher.tracker.snapshot(),
        file_storage=file_store.stats(),
    )
    if not usable:
        logger.warning("Health check: no API keys configured")
    return JSONResponse(
        status_code=200 if usable else 503,
        content=health.model_dump(),
        headers=_NO_CACHE,
    )

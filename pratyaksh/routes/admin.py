"""
admin.py — API key administration.

Routes:
  GET  /api/v1/admin/keys          — masked keys + counts
  POST /api/v1/admin/keys          — overwrite / blank keys by id, then persist
  POST /api/v1/admin/test-key      — check a single key against the provider
  POST /api/v1/admin/test-fallback — check every key, then run a full analysis
                                     of a 1×1 PNG through the failover chain

When ADMIN_TOKEN is set these routes require "Authorization: Bearer <token>";
otherwise they are open (local development).

Secrets are only ever returned masked and never logged.
"""

import base64
import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pratyaksh.ai.dispatcher import AnalysisDispatcher, get_dispatcher
from pratyaksh.core.config import settings
from pratyaksh.models.admin import (
    FallbackTestResponse,
    KeyCheckResult,
    KeysResponse,
    KeysUpdateRequest,
    KeysUpdateResponse,
    KeyTestRequest,
    KeyTestResponse,
)
from pratyaksh.services.key_storage import KeyStorageError, save_keys

logger = logging.getLogger(__name__)

# Reusable bearer extractor (does NOT auto-raise on missing token)
_bearer = HTTPBearer(auto_error=False)
CredDep = Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)]

# 1×1 transparent PNG used by the fallback self-test
_TEST_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)


async def require_admin(credentials: CredDep) -> None:
    """FastAPI dependency — enforce ADMIN_TOKEN when one is configured."""
    if not settings.admin_token:
        return
    if credentials is None or not secrets.compare_digest(credentials.credentials, settings.admin_token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin token",
            headers={"WWW-Authenticate": "Bearer"},
        )


router = APIRouter(prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)])

DispatcherDep = Annotated[AnalysisDispatcher, Depends(get_dispatcher)]


@router.get("/keys", response_model=KeysResponse)
async def get_keys(dispatcher: DispatcherDep):
    pool = dispatcher.pool
    logger.info("Admin panel loaded %d key(s), %d have values", len(pool), pool.working_count())
    return KeysResponse(keys=pool.masked(), total_keys=len(pool), working_keys=pool.working_count())


@router.post("/keys", response_model=KeysUpdateResponse)
async def update_keys(payload: KeysUpdateRequest, dispatcher: DispatcherDep):
    """
    Merge the submitted keys into the pool. A replaced secret starts with a
    clean failure record. Returns 500 if the dev-mode keys file can't be written.
    """
    pool = dispatcher.pool
    changed = pool.update(payload.keys)
    for key_id in changed:
        dispatcher.tracker.reset(key_id)
        logger.info("Updated API key %s", key_id)

    try:
        save_keys(pool.as_dict())
    except KeyStorageError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return KeysUpdateResponse(total_keys=len(pool), working_keys=pool.working_count())


@router.post("/test-key", response_model=KeyTestResponse)
async def test_key(payload: KeyTestRequest, dispatcher: DispatcherDep):
    label = payload.key_id or "unsaved key"
    if not payload.key.strip():
        return KeyTestResponse(success=False, error="No API key provided")

    working = await dispatcher.client.check_key(payload.key)
    logger.info("Key check for %s: %s", label, "working" if working else "rejected")
    return KeyTestResponse(success=working)


@router.post("/test-fallback", response_model=FallbackTestResponse)
async def test_fallback(dispatcher: DispatcherDep):
    """Per-key connectivity check followed by one real pass through the failover chain."""
    usable = dispatcher.pool.usable()
    checks: list[KeyCheckResult] = []
    details: list[str] = []

    for credential in usable:
        working = await dispatcher.client.check_key(credential.secret)
        checks.append(KeyCheckResult(
            key_id=credential.identifier,
            working=working,
            error=None if working else "Key rejected or provider unreachable",
        ))
        details.append(f"✓ {credential.identifier}: Working" if working else f"✗ {credential.identifier}: Failed")

    working_count = sum(1 for c in checks if c.working)

    outcome = await dispatcher.analyze("image/png", "test-fallback.png", _TEST_PNG)
    if outcome.is_fallback:
        details.append("→ Using basic fallback analysis")
        message = (
            f"{working_count}/{len(usable)} keys working, but analysis failed - check key quotas"
            if working_count
            else "All keys failed - using fallback analysis"
        )
    else:
        message = f"Fallback mechanism working! {working_count}/{len(usable)} keys operational"

    return FallbackTestResponse(
        success=not outcome.is_fallback or working_count > 0,
        message=message,
        total_keys=len(usable),
        working_keys=working_count,
        fallback_used=outcome.is_fallback,
        keys=checks,
        details=details,
        final_result=outcome.payload.model_dump(by_alias=True, mode="json"),
    )

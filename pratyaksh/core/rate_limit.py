"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address. Every analysis request can fan out
to several upstream credentials, so the upload and analyze routes are
limited well below the upstream quota.

Usage in routes:
    from fastapi import Request
    from pratyaksh.core.rate_limit import limiter

    @router.post("/some-ai-endpoint")
    @limiter.limit("20/minute")
    async def my_endpoint(request: Request, payload: MyRequest):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

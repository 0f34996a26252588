"""
test_rate_limit.py — Rate limiting on the upload and analysis endpoints.

Endpoints under test (all accept POST):
  /api/v1/upload          — limit: 30/minute
  /api/v1/analyze         — limit: 20/minute
  /api/v1/analyze/direct  — limit: 20/minute

Strategy for 429 tests:
  Patch `limiter.limiter.hit` to return False, which tells slowapi the
  moving-window bucket is full → RateLimitExceeded → 429. This avoids
  sending 20–30 real requests per test.
"""

import base64
from unittest.mock import patch

from pratyaksh.core.rate_limit import limiter

_DUMMY_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake-media-bytes").decode()


async def _upload_post(client):
    return await client.post("/api/v1/upload", json={"file_b64": _DUMMY_B64, "filename": "a.png"})


async def _direct_post(client):
    return await client.post("/api/v1/analyze/direct", json={"media_b64": _DUMMY_B64, "filename": "a.png"})


async def _analyze_post(client):
    return await client.post("/api/v1/analyze", json={"file_id": "missing"})


# ══ Normal operation (under the limit) ════════════════════════════════════════

class TestRateLimitNormal:
    async def test_upload_returns_200(self, client):
        assert (await _upload_post(client)).status_code == 200

    async def test_direct_returns_200(self, client):
        assert (await _direct_post(client)).status_code == 200

    async def test_multiple_requests_within_limit_succeed(self, client):
        for _ in range(3):
            assert (await _upload_post(client)).status_code == 200


# ══ Rate limit exceeded (429) ══════════════════════════════════════════════════

class TestRateLimitExceeded:
    async def test_upload_429_when_limit_exceeded(self, client):
        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await _upload_post(client)
        assert r.status_code == 429

    async def test_direct_429_when_limit_exceeded(self, client):
        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await _direct_post(client)
        assert r.status_code == 429

    async def test_analyze_429_when_limit_exceeded(self, client):
        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await _analyze_post(client)
        assert r.status_code == 429

    async def test_429_response_has_error_field(self, client):
        """slowapi's default handler returns {"error": "Rate limit exceeded: ..."}."""
        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await _upload_post(client)

        assert r.headers.get("content-type", "").startswith("application/json")
        assert "limit" in r.json()["error"].lower()

    async def test_after_limit_reset_request_succeeds(self, client):
        with patch.object(limiter.limiter, "hit", return_value=False):
            assert (await _upload_post(client)).status_code == 429
        assert (await _upload_post(client)).status_code == 200


# ══ Limiter configuration ══════════════════════════════════════════════════════

class TestLimiterSetup:
    async def test_limiter_attached_to_app_state(self, client):
        from pratyaksh.main import app

        assert app.state.limiter is limiter

    def test_limiter_uses_ip_key_function(self):
        from slowapi.util import get_remote_address

        assert limiter._key_func is get_remote_address

    async def test_health_is_not_rate_limited(self, client):
        with patch.object(limiter.limiter, "hit", return_value=False):
            r = await client.get("/health")
        assert r.status_code in (200, 503)

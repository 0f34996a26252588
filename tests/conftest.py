"""
pytest configuration and shared fixtures for the Pratyaksh API tests.

Key concern: tests must never reach a real AI provider or read a developer's
keys. We achieve this by:
  1. Pointing KEYS_FILE at a throwaway temp directory and blanking
     GEMINI_API_KEY before the app is imported, so the module-level
     credential pool starts empty.
  2. Building dispatchers on top of httpx.MockTransport, which records every
     upstream request and answers per API key.
  3. Driving time through ManualClock so cooldowns are deterministic.
"""

import json
import os
import tempfile
from typing import Callable, Union

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
_TMP_DIR = tempfile.mkdtemp(prefix="pratyaksh-tests-")
os.environ["KEYS_FILE"] = os.path.join(_TMP_DIR, "keys.json")
os.environ["GEMINI_API_KEY"] = ""
os.environ["AI_MOCK_MODE"] = "false"
os.environ["ADMIN_TOKEN"] = ""
os.environ.setdefault("ENVIRONMENT", "test")

from pratyaksh.ai.availability import AvailabilityTracker  # noqa: E402
from pratyaksh.ai.credentials import CredentialPool  # noqa: E402
from pratyaksh.ai.dispatcher import AnalysisDispatcher  # noqa: E402
from pratyaksh.ai.gemini_client import GeminiClient  # noqa: E402
from pratyaksh.core.clock import ManualClock  # noqa: E402
from pratyaksh.core.config import Settings  # noqa: E402

VALID_REPORT = {
    "authenticityScore": 91,
    "confidenceLevel": "High",
    "keyIndicators": [
        {"name": "Facial Consistency", "status": "Natural", "reason": "Lighting is consistent."},
        {"name": "Visual Artifacts", "status": "Suspicious", "reason": "Minor halo near the hairline."},
    ],
    "top5Factors": [
        {"title": "Catchlights", "description": "Matching reflections in both eyes.",
         "confidence": 88, "category": "Visual"},
    ],
    "finalAssessment": "Image is very likely authentic.",
}

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def gemini_reply(text: str, status_code: int = 200) -> httpx.Response:
    """A generateContent response whose single text part is `text`."""
    body = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return httpx.Response(status_code, json=body)


def report_reply(report: dict = VALID_REPORT) -> httpx.Response:
    return gemini_reply(json.dumps(report))


class FakeUpstream:
    """
    httpx.MockTransport keyed by the `key` query parameter.

    calls holds the key of every request in arrival order; bodies holds the
    decoded JSON bodies.
    """

    def __init__(self, replies: dict[str, Reply] | None = None) -> None:
        self.replies = replies or {}
        self.calls: list[str] = []
        self.bodies: list[dict] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        key = request.url.params.get("key", "")
        self.calls.append(key)
        if request.content:
            self.bodies.append(json.loads(request.content))
        reply = self.replies.get(key)
        if reply is None:
            return httpx.Response(500, text="no reply configured")
        if callable(reply):
            return reply(request)
        # Fresh copy so one canned reply can serve repeated requests
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)


def make_settings(**overrides) -> Settings:
    values = {
        "ai_mock_mode": False,
        "gemini_api_key": "",
        "environment": "test",
        "keys_file": os.environ["KEYS_FILE"],
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_dispatcher(
    keys: dict[str, str],
    upstream: FakeUpstream,
    clock: ManualClock | None = None,
    **settings_overrides,
) -> AnalysisDispatcher:
    config = make_settings(**settings_overrides)
    tracker = AvailabilityTracker(
        cooldown_seconds=config.provider_cooldown_seconds,
        max_failures=config.provider_max_failures,
        clock=clock or ManualClock(),
    )
    return AnalysisDispatcher(
        pool=CredentialPool(keys),
        tracker=tracker,
        client=GeminiClient(config, transport=upstream.transport),
    )


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock(start=1000.0)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
async def client():
    """
    HTTPX async test client wired to the FastAPI app.

    Rate-limit counters are reset and dependency overrides cleared around
    every test so tests stay independent.
    """
    from pratyaksh.core.rate_limit import limiter
    from pratyaksh.main import app

    try:
        limiter._limiter.storage.reset()
    except Exception:
        pass  # Some storage backends don't support reset

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def use_dispatcher():
    """Route the app's get_dispatcher dependency to a test dispatcher."""
    from pratyaksh.ai.dispatcher import get_dispatcher
    from pratyaksh.main import app

    def _install(dispatcher: AnalysisDispatcher) -> AnalysisDispatcher:
        app.dependency_overrides[get_dispatcher] = lambda: dispatcher
        return dispatcher

    return _install

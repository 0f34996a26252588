"""
upstream.py — Shared plumbing for the generative-model HTTP clients.

Each provider client turns (credential, prompt, media) into one HTTP call and
returns the model's raw text. Every failure mode (connection error, timeout,
non-2xx status, a body without text) is raised as UpstreamError so the
dispatcher can record it and move to the next credential.

Supports two runtime modes (set via AI_MOCK_MODE env var):
  - REAL mode (default): makes the HTTP call with the credential's secret.
  - MOCK mode: returns a canned report for the media category without any
    network access. Use for local dev and demos without real keys.

Tests inject an httpx transport (httpx.MockTransport) instead of mocking
the client class.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from pratyaksh.ai.credentials import Credential
from pratyaksh.ai.errors import UpstreamError
from pratyaksh.ai.prompts import get_large_file_prompt, media_category
from pratyaksh.core.config import Settings, settings

logger = logging.getLogger(__name__)

# Canned responses for mock mode, keyed by media category.
_MOCK_RESPONSES: dict[str, dict[str, Any]] = {
    "image": {
        "authenticityScore": 88,
        "confidenceLevel": "High",
        "keyIndicators": [
            {"name": "Facial Consistency", "status": "Natural",
             "reason": "[MOCK] Symmetric lighting and consistent skin texture."},
            {"name": "Visual Artifacts", "status": "Natural",
             "reason": "[MOCK] Only ordinary JPEG compression artifacts present."},
        ],
        "top5Factors": [
            {"title": "Consistent catchlights", "description": "[MOCK] Both eyes reflect the same light source.",
             "confidence": 84, "category": "Visual"},
        ],
        "finalAssessment": "[MOCK] No manipulation detected — mock mode active.",
    },
    "video": {
        "authenticityScore": 80,
        "confidenceLevel": "Medium",
        "keyIndicators": [
            {"name": "Temporal Consistency", "status": "Natural",
             "reason": "[MOCK] No inter-frame flicker around the face region."},
            {"name": "Audio-Visual Sync", "status": "Natural",
             "reason": "[MOCK] Lip movement matches speech."},
        ],
        "top5Factors": [],
        "finalAssessment": "[MOCK] Video appears authentic — mock mode active.",
    },
    "audio": {
        "authenticityScore": 86,
        "confidenceLevel": "Medium",
        "keyIndicators": [
            {"name": "Breathing Patterns", "status": "Natural",
             "reason": "[MOCK] Irregular breaths between phrases."},
        ],
        "top5Factors": [],
        "finalAssessment": "[MOCK] Natural human speech — mock mode active.",
    },
    "other": {
        "authenticityScore": 75,
        "confidenceLevel": "Low",
        "keyIndicators": [],
        "top5Factors": [],
        "finalAssessment": "[MOCK] Unrecognised media type — mock mode active.",
    },
}


@dataclass(frozen=True)
class MediaPayload:
    media_type: str
    media_name: str
    data: bytes = b""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def category(self) -> str:
        return media_category(self.media_type)

    def b64(self) -> str:
        return base64.b64encode(self.data).decode()


class UpstreamClient:
    """
    Base class for provider clients.

    Subclasses implement _generate() and _check_key(); this class handles
    mock mode, the inline-size decision and HTTP error translation.
    """

    name = "upstream"

    def __init__(
        self,
        config: Settings = settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.mock_mode = config.ai_mock_mode
        self.timeout = config.upstream_timeout_seconds
        self.max_inline_bytes = config.max_inline_media_bytes
        self._transport = transport

        if self.mock_mode:
            logger.info("%s client initialised in MOCK mode", self.name)

    def label(self, credential: Credential) -> str:
        return f"{self.name} ({credential.identifier})"

    def can_inline(self, media: Optional[MediaPayload]) -> bool:
        return media is not None and 0 < media.size <= self.max_inline_bytes

    def text_prompt(self, prompt: str, media: Optional[MediaPayload]) -> str:
        """Prompt to send when the media is not attached inline."""
        if media is not None and media.size > self.max_inline_bytes:
            logger.info(
                "Media too large for inline upload (%d bytes > %d), using text-only analysis",
                media.size, self.max_inline_bytes,
            )
            return get_large_file_prompt(prompt, media.media_type, media.media_name, media.size)
        return prompt

    async def generate(
        self,
        credential: Credential,
        prompt: str,
        media: Optional[MediaPayload] = None,
    ) -> str:
        """
        Ask the model for a report.

        Returns:
            The model's raw response text (expected to hold the JSON report).

        Raises:
            UpstreamError: on any transport, status or payload-shape failure.
        """
        if self.mock_mode:
            category = media.category if media else "other"
            return json.dumps(_MOCK_RESPONSES[category])
        if not credential.usable:
            raise UpstreamError(f"{self.label(credential)} API key not configured")
        return await self._generate(credential, prompt, media)

    async def check_key(self, secret: str) -> bool:
        """True if the provider accepts `secret` (lists models with it)."""
        if not secret or not secret.strip():
            return False
        try:
            return await self._check_key(secret.strip())
        except httpx.HTTPError as exc:
            logger.warning("%s key check failed: %s", self.name, exc)
            return False

    async def _generate(self, credential: Credential, prompt: str, media: Optional[MediaPayload]) -> str:
        raise NotImplementedError

    async def _check_key(self, secret: str) -> bool:
        raise NotImplementedError

    # ── HTTP helpers ───────────────────────────────────────────────────────────

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout or self.timeout, transport=self._transport)

    async def _post_json(
        self,
        credential: Credential,
        url: str,
        body: dict[str, Any],
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        label = self.label(credential)
        try:
            async with self._client() as client:
                response = await client.post(url, params=params, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"{label} request timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{label} request failed: {exc.__class__.__name__}") from exc

        if not response.is_success:
            message = f"{label} API error: {response.status_code}"
            if response.status_code == 413:
                message += " (File too large for processing)"
            elif response.status_code == 429:
                message += " (Rate Limited)"
            logger.debug("%s error body: %s", label, response.text[:500])
            raise UpstreamError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{label} returned a non-JSON body", status_code=response.status_code) from exc

        if not isinstance(data, dict):
            raise UpstreamError(f"{label} returned an unexpected body", status_code=response.status_code)
        return data

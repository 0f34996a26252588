"""
GeminiClient — Google Gemini generateContent over REST.

The key travels as the `key` query parameter, so each request can use a
different credential; the google-generativeai SDK configures one key per
process, which doesn't fit per-request failover.

Requests ask for structured JSON output (responseMimeType) with a low
temperature. Media up to settings.max_inline_media_bytes is attached as
inline base64 data; anything larger is described in an extended text prompt.
"""

import logging
from typing import Any, Optional

from pratyaksh.ai.credentials import Credential
from pratyaksh.ai.errors import UpstreamError
from pratyaksh.ai.upstream import MediaPayload, UpstreamClient

logger = logging.getLogger(__name__)

_GENERATION_CONFIG = {
    "temperature": 0.1,
    "maxOutputTokens": 2000,
    "responseMimeType": "application/json",
}


class GeminiClient(UpstreamClient):
    name = "Google Gemini"

    def build_request(self, prompt: str, media: Optional[MediaPayload]) -> dict[str, Any]:
        if self.can_inline(media):
            parts = [
                {"text": prompt},
                {"inline_data": {"mime_type": media.media_type, "data": media.b64()}},
            ]
        else:
            parts = [{"text": self.text_prompt(prompt, media)}]
        return {"contents": [{"parts": parts}], "generationConfig": dict(_GENERATION_CONFIG)}

    async def _generate(self, credential: Credential, prompt: str, media: Optional[MediaPayload]) -> str:
        body = self.build_request(prompt, media)
        logger.info(
            "Sending %s request to %s",
            "multimodal" if self.can_inline(media) else "text-only", self.label(credential),
        )
        data = await self._post_json(
            credential,
            self.config.gemini_endpoint,
            body,
            params={"key": credential.secret},
            headers={"Content-Type": "application/json"},
        )

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            # Safety blocks come back as 200 with promptFeedback and no candidates
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            detail = f" (blocked: {reason})" if reason else ""
            raise UpstreamError(f"No response from {self.label(credential)}{detail}")
        return text

    async def _check_key(self, secret: str) -> bool:
        async with self._client(timeout=10.0) as client:
            response = await client.get(self.config.gemini_models_url, params={"key": secret})
        return response.is_success

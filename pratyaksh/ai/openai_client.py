"""
OpenAIClient — OpenAI-compatible chat completions with bearer-token auth.

Only images can be attached (as data URLs to the vision model); audio and
video are analysed from the text prompt alone, with a note telling the model
the content was not attached.
"""

import logging
from typing import Any, Optional

from pratyaksh.ai.credentials import Credential
from pratyaksh.ai.errors import UpstreamError
from pratyaksh.ai.upstream import MediaPayload, UpstreamClient

logger = logging.getLogger(__name__)

_NOT_ATTACHED_NOTE = "\n\nNote: File content analysis not supported for this file type with this provider."


class OpenAIClient(UpstreamClient):
    name = "OpenAI"

    def build_request(self, prompt: str, media: Optional[MediaPayload]) -> dict[str, Any]:
        if self.can_inline(media) and media.category == "image":
            content: Any = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:{media.media_type};base64,{media.b64()}"}},
            ]
            model = self.config.openai_vision_model
        else:
            content = self.text_prompt(prompt, media)
            if media is not None and media.size <= self.max_inline_bytes:
                content += _NOT_ATTACHED_NOTE
            model = self.config.openai_model

        return {
            "model": model,
            "messages": [{"role": "user", "content": content}],
            "temperature": 0.1,
            "max_tokens": 2000,
            "response_format": {"type": "json_object"},
        }

    async def _generate(self, credential: Credential, prompt: str, media: Optional[MediaPayload]) -> str:
        data = await self._post_json(
            credential,
            self.config.openai_endpoint,
            self.build_request(prompt, media),
            headers={"Authorization": f"Bearer {credential.secret}"},
        )
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            raise UpstreamError(f"No response from {self.label(credential)}")
        return text

    async def _check_key(self, secret: str) -> bool:
        async with self._client(timeout=10.0) as client:
            response = await client.get(
                self.config.openai_models_url,
                headers={"Authorization": f"Bearer {secret}"},
            )
        return response.is_success

"""
response_parser.py — Turn upstream model text into a validated ScoreReport.

Requests ask for JSON output (responseMimeType / JSON prompt), so the normal
path is a plain json.loads. Models still sometimes wrap the object in a
```json fence or add a sentence around it; the outermost {...} span is tried
as a second pass. Anything that still fails raises ResponseValidationError,
which the dispatcher counts as a failure of that credential.
"""

import json
import logging
import re

from pydantic import ValidationError

from pratyaksh.ai.errors import ResponseValidationError
from pratyaksh.models.analysis import ScoreReport

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _load_json_object(text: str) -> dict:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise ResponseValidationError("No JSON object in model response") from None
        try:
            data = json.loads(text[start:end + 1])
        except json.JSONDecodeError as exc:
            raise ResponseValidationError(f"Malformed JSON in model response: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise ResponseValidationError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_score_report(text: str, source: str = "upstream") -> ScoreReport:
    """
    Parse and validate a model response.

    Args:
        text:   Raw response text from the model.
        source: Credential / provider label, named in error messages.

    Raises:
        ResponseValidationError: empty text, no JSON object, or a payload that
            doesn't match the ScoreReport shape.
    """
    if not text or not text.strip():
        raise ResponseValidationError(f"Empty response from {source}")

    cleaned = _strip_fences(text)
    data = _load_json_object(cleaned)

    try:
        return ScoreReport.model_validate(data)
    except ValidationError as exc:
        logger.debug("Invalid report from %s: %s", source, cleaned[:500])
        raise ResponseValidationError(
            f"Invalid response structure from {source}: {exc.error_count()} error(s)"
        ) from exc

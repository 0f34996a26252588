"""
Exceptions raised inside the analysis layer.

UpstreamError and ResponseValidationError are absorbed by the dispatcher
(recorded against the credential, then the next credential is tried).
InvalidMediaError is the only one that reaches the routes.
"""

from typing import Optional

_RATE_LIMIT_MARKERS = ("rate limit", "quota", "too many requests", "resource_exhausted")


class UpstreamError(Exception):
    """The upstream call failed: network error, timeout, non-2xx or empty body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseValidationError(Exception):
    """The upstream answered but the text is not a valid score report."""


class InvalidMediaError(ValueError):
    """The caller did not supply media bytes or a media type."""


def is_rate_limit_error(exc: BaseException) -> bool:
    """True for HTTP 429 or an error message that mentions rate limits or quota."""
    if isinstance(exc, UpstreamError) and exc.status_code == 429:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)

"""
dispatcher.py — Credential failover for one analysis request.

Flow per request:

  Start → TryNextCredential → Success (return)
                            ↘ RecordFailure → TryNextCredential → ...
                                              ↘ Exhausted → Fallback (return)

1. Take configured credentials with a non-blank secret, in pool order.
2. Drop those the AvailabilityTracker has cooling down.
3. None left → fallback report, no network call.
4. Call the upstream model with each credential in turn (one call in flight,
   bounded by the client timeout). The first response that parses into a
   valid ScoreReport wins; later credentials are never called.
5. Any failure is recorded once against that credential (flagged as a rate
   limit for 429 / quota errors) and the loop moves on.
6. Every credential failed → fallback report.

Upstream failures never escape analyze(). The only exception it raises is
InvalidMediaError for a missing media type or empty media.
"""

import logging

from pratyaksh.ai.availability import AvailabilityTracker
from pratyaksh.ai.credentials import CredentialPool, credential_pool
from pratyaksh.ai.errors import (
    InvalidMediaError,
    ResponseValidationError,
    UpstreamError,
    is_rate_limit_error,
)
from pratyaksh.ai.fallback import fallback_report
from pratyaksh.ai.gemini_client import GeminiClient
from pratyaksh.ai.openai_client import OpenAIClient
from pratyaksh.ai.prompts import get_analysis_prompt
from pratyaksh.ai.response_parser import parse_score_report
from pratyaksh.ai.upstream import MediaPayload, UpstreamClient
from pratyaksh.core.config import Settings, settings
from pratyaksh.models.analysis import AnalysisOutcome, OutcomeKind

logger = logging.getLogger(__name__)


class AnalysisDispatcher:
    def __init__(
        self,
        pool: CredentialPool,
        tracker: AvailabilityTracker,
        client: UpstreamClient,
    ) -> None:
        self.pool = pool
        self.tracker = tracker
        self.client = client

    async def analyze(self, media_type: str, media_name: str, media_bytes: bytes) -> AnalysisOutcome:
        if not media_type:
            raise InvalidMediaError("Missing media type")
        if not media_bytes:
            raise InvalidMediaError("Missing media data")

        media = MediaPayload(media_type=media_type, media_name=media_name or "unknown", data=media_bytes)
        logger.info("Starting analysis for %s (%s), %d bytes", media.media_name, media_type, media.size)

        candidates = [c for c in self.pool.usable() if self.tracker.is_available(c.identifier)]
        if not candidates:
            logger.warning("No available API keys, using fallback analysis")
            return self._fallback(media_type)

        logger.info("Found %d available API key(s)", len(candidates))
        prompt = get_analysis_prompt(media_type, media.media_name)

        for credential in candidates:
            label = self.client.label(credential)
            logger.info("Attempting analysis with %s", label)
            try:
                text = await self.client.generate(credential, prompt, media)
                report = parse_score_report(text, source=label)
            except (UpstreamError, ResponseValidationError) as exc:
                rate_limited = is_rate_limit_error(exc)
                self.tracker.record_failure(credential.identifier, is_rate_limit=rate_limited)
                logger.warning(
                    "%s failed%s, trying next key: %s",
                    label, " (rate limited)" if rate_limited else "", exc,
                )
                continue
            except Exception:
                self.tracker.record_failure(credential.identifier)
                logger.exception("%s failed unexpectedly, trying next key", label)
                continue

            logger.info(
                "Analysis successful with %s: %d%% authentic, %s confidence",
                label, report.authenticity_score, report.confidence_level.value,
            )
            return AnalysisOutcome(kind=OutcomeKind.SUCCESS, payload=report, credential_id=credential.identifier)

        logger.warning("All available API keys failed, using fallback analysis")
        return self._fallback(media_type)

    @staticmethod
    def _fallback(media_type: str) -> AnalysisOutcome:
        return AnalysisOutcome(kind=OutcomeKind.FALLBACK, payload=fallback_report(media_type))


def build_upstream_client(config: Settings = settings) -> UpstreamClient:
    """Client for the configured AI_PROVIDER (gemini by default)."""
    if config.ai_provider.lower() == "openai":
        return OpenAIClient(config)
    return GeminiClient(config)


def build_dispatcher(config: Settings = settings, pool: CredentialPool = credential_pool) -> AnalysisDispatcher:
    tracker = AvailabilityTracker(
        cooldown_seconds=config.provider_cooldown_seconds,
        max_failures=config.provider_max_failures,
    )
    return AnalysisDispatcher(pool=pool, tracker=tracker, client=build_upstream_client(config))


# Module-level singleton; routes reach it through get_dispatcher() so tests
# can swap it with app.dependency_overrides.
dispatcher = build_dispatcher()


def get_dispatcher() -> AnalysisDispatcher:
    return dispatcher

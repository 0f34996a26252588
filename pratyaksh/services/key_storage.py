"""
key_storage.py — Where the upstream API keys come from.

Production (ENVIRONMENT=production):
  - GEMINI_API_KEY            → key1
  - GEMINI_API_KEY_1, _2, ... → key2, key3, ... (stops at the first gap)
  Saving is a no-op; keys are managed in the deployment's environment.

Everywhere else:
  - The JSON keys file (settings.keys_file) if it exists and parses,
  - otherwise GEMINI_API_KEY as key1.
  Saving rewrites the JSON file so admin edits survive a restart.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from pratyaksh.core.config import Settings, settings

logger = logging.getLogger(__name__)

_PRIMARY_VAR = "GEMINI_API_KEY"


class KeyStorageError(Exception):
    """The keys file could not be written."""


def _env_keys(environ: Mapping[str, str]) -> dict[str, str]:
    keys: dict[str, str] = {}
    if environ.get(_PRIMARY_VAR):
        keys["key1"] = environ[_PRIMARY_VAR]

    index = 1
    while environ.get(f"{_PRIMARY_VAR}_{index}"):
        # Offset by one: key1 is reserved for the primary variable
        keys[f"key{index + 1}"] = environ[f"{_PRIMARY_VAR}_{index}"]
        index += 1
    return keys


def load_keys(
    config: Settings = settings,
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Return {key_id: secret} in failover order."""
    environ = os.environ if environ is None else environ

    if config.is_production:
        keys = _env_keys(environ)
        logger.info("Production mode: loaded %d key(s) from environment", len(keys))
        return keys

    path = Path(config.keys_file)
    if path.exists():
        try:
            stored = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(stored, dict):
                keys = {str(k): v for k, v in stored.items() if isinstance(v, str)}
                logger.info("Development mode: loaded %d key(s) from %s", len(keys), path)
                return keys
            logger.warning("Ignoring %s: expected a JSON object", path)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Error loading keys from %s, using environment: %s", path, exc)

    keys = {}
    primary = environ.get(_PRIMARY_VAR) or config.gemini_api_key
    if primary:
        keys["key1"] = primary
        logger.info("Using %s for key1", _PRIMARY_VAR)
    return keys


def save_keys(keys: Mapping[str, str], config: Settings = settings) -> bool:
    """
    Persist keys to the JSON file.

    Returns False when skipped (production), True when written.

    Raises:
        KeyStorageError: the file could not be written.
    """
    if config.is_production:
        logger.info("Production mode: keys are managed via environment variables, skipping save")
        return False

    path = Path(config.keys_file)
    try:
        path.write_text(json.dumps(dict(keys), indent=2), encoding="utf-8")
    except OSError as exc:
        logger.error("Error saving keys to %s: %s", path, exc)
        raise KeyStorageError("Failed to save keys to persistent storage") from exc

    logger.info("Development mode: saved %d key(s) to %s", len(keys), path)
    return True


def working_keys_count(keys: Mapping[str, str]) -> int:
    return sum(1 for v in keys.values() if v and v.strip())


# ── Environment validation ──────────────────────────────────────────────────────

@dataclass
class EnvValidation:
    is_valid: bool
    key_count: int
    missing_vars: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_environment(
    config: Settings = settings,
    environ: Optional[Mapping[str, str]] = None,
) -> EnvValidation:
    """Check that at least one API key is configured and flag thin setups."""
    environ = os.environ if environ is None else environ
    missing: list[str] = []
    warnings: list[str] = []

    has_primary = bool(environ.get(_PRIMARY_VAR) or config.gemini_api_key)
    if not has_primary:
        missing.append(_PRIMARY_VAR)

    backups = len(_env_keys(environ)) - (1 if environ.get(_PRIMARY_VAR) else 0)
    total = (1 if has_primary else 0) + max(0, backups)

    if total == 0:
        missing.append("At least one GEMINI_API_KEY is required")
    elif total == 1:
        warnings.append(
            "Consider adding backup API keys (GEMINI_API_KEY_1, etc.) "
            "for better rate limiting and reliability"
        )

    if config.is_production and total < 2:
        warnings.append("Production deployments should have multiple API keys for reliability")

    return EnvValidation(is_valid=not missing, key_count=total, missing_vars=missing, warnings=warnings)


def log_environment_status(config: Settings = settings) -> EnvValidation:
    """Log the validation result once at startup."""
    result = validate_environment(config)
    if result.is_valid:
        logger.info("Environment validation passed (%d API key(s) configured)", result.key_count)
        for warning in result.warnings:
            logger.warning(warning)
    else:
        logger.error(
            "Environment validation failed, missing: %s. Analyses will use the fallback report.",
            ", ".join(result.missing_vars),
        )
    return result

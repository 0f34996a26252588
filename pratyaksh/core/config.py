"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. API keys are injected via environment (or the dev-mode
keys file managed by the admin endpoints), never hard-coded.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins for the web front-end.
    cors_origins_str: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── Upstream AI provider ──────────────────────────────────────
    # "gemini" passes the key as a query parameter,
    # "openai" sends it as a bearer token.
    ai_provider: str = "gemini"

    # Primary key. Backup keys are read as GEMINI_API_KEY_1, _2, ... by
    # services/key_storage.py since their count is open-ended.
    gemini_api_key: str = ""
    gemini_endpoint: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.0-flash-exp:generateContent"
    )
    gemini_models_url: str = "https://generativelanguage.googleapis.com/v1beta/models"

    openai_endpoint: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o"
    openai_models_url: str = "https://api.openai.com/v1/models"

    # When True, upstream calls return canned report JSON without touching
    # the network. Credentials are still required to reach the client.
    ai_mock_mode: bool = False

    # ─── Failover policy ───────────────────────────────────────────
    provider_cooldown_seconds: float = 60.0
    provider_max_failures: int = 3
    upstream_timeout_seconds: float = 60.0

    # Media above this size is described to the model in text instead of
    # being attached inline.
    max_inline_media_bytes: int = 15 * 1024 * 1024

    # ─── Storage ───────────────────────────────────────────────────
    # Dev-mode persistent key storage (ignored in production).
    keys_file: str = ".gemini-keys.json"

    # Uploaded files are dropped from memory after this many seconds.
    file_ttl_seconds: float = 30 * 60

    # ─── Admin ─────────────────────────────────────────────────────
    # When set, /api/v1/admin/* requires "Authorization: Bearer <token>".
    admin_token: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton — import this everywhere instead of instantiating Settings()
settings = Settings()

"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Two sources, in priority order:
#
#   1. Environment variables, e.g. OPENAI_API_KEY=sk-abc123 (always win)
#   2. The .env file in the working directory (local development)
#
# Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.  Defaults
# below apply when neither source sets a value.  See .env.example.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Immuse application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === OpenAI ===
    # Empty key = "not configured": the app still starts, every generation
    # call fails fast and the fallback payloads are served instead.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint override
    openai_text_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0

    # === Storage ===
    database_path: str = "data/immuse.db"
    upload_dir: str = "uploads"
    max_upload_mb: int = 25

    # === Outbound HTTP (URL archives, museum directory) ===
    http_timeout_seconds: float = 30.0
    museum_directory_url: str = "https://museum.mcsc.gov.ua/museums"

    # === Generation ===
    # Language the model is asked to answer in.  Fallback payloads are fixed.
    response_language: str = "Ukrainian"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "*"  # comma-separated
    config_path: str = "config/config.yaml"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def get_cors_origins(self) -> list[str]:
        """Split ``cors_origins`` into a list, ignoring blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

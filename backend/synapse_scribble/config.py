"""
Synapse Scribble Backend - Application Configuration
====================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Deployments must set
    GEMINI_API_KEY and should restrict CORS_ORIGINS.
    """

    # ── Google Gemini ─────────────────────────────────────────────────────
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key used by every flow"
    )

    # Text model for summaries, themes, whiteboard ideas, insights and reports
    gemini_text_model: str = Field(default="gemini-1.5-flash-latest")

    # Image model; must support the combined TEXT + IMAGE response modalities
    gemini_image_model: str = Field(default="gemini-2.0-flash-exp")

    # Per-request timeout handed to the SDK (seconds)
    gemini_request_timeout: int = Field(default=60, ge=5, le=600)

    # ── Audio Input ───────────────────────────────────────────────────────
    # Upper bound for decoded audio data URIs (default 25MB)
    max_audio_size: int = Field(default=26_214_400, ge=1_048_576, le=104_857_600)

    # ── Sessions ──────────────────────────────────────────────────────────
    # Analysis cycles allowed per session before a report must be generated
    max_cycles: int = Field(default=5, ge=1, le=50)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Retry Configuration ───────────────────────────────────────────────
    # Tenacity settings for Gemini calls. One attempt means flows are
    # all-or-nothing per invocation; raise it only for batch/offline use.
    retry_max_attempts: int = Field(default=1, ge=1, le=10)
    retry_min_wait: int = Field(default=2, ge=1, le=30)
    retry_max_wait: int = Field(default=10, ge=5, le=120)

    # ── Circuit Breaker ───────────────────────────────────────────────────
    # After N consecutive failures, stop calling Gemini for M seconds
    cb_failure_threshold: int = Field(default=5, ge=2, le=20)
    cb_recovery_timeout: int = Field(default=60, ge=10, le=300)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Per-IP sliding window applied to /api/* routes
    rate_limit_requests: int = Field(default=100, ge=10, le=10000)
    rate_limit_window: int = Field(default=3600, ge=60, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        Validates that critical settings are configured.

        Called during app startup (lifespan). Raises ValueError listing
        every missing setting with guidance on how to fix it.
        """
        errors = []
        if not self.gemini_api_key or self.gemini_api_key == "your_gemini_api_key_here":
            errors.append(
                "GEMINI_API_KEY is not set. "
                "Get a free key at https://aistudio.google.com/app/apikey"
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()

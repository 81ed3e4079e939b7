"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the analysis pipeline, and
the maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class GeminiSettings(BaseSettings):
    """Configuration for Gemini model access and billing."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    api_key: str = Field(..., alias="GEMINI_API_KEY")
    model_name: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL_NAME")
    temperature: float = Field(
        0.3,
        alias="GEMINI_TEMPERATURE",
        ge=0.0,
        le=2.0,
        description="Kept low so identical prompts yield stable reports.",
    )
    max_output_tokens: int = Field(8192, alias="GEMINI_MAX_OUTPUT_TOKENS", gt=0)
    request_timeout_seconds: float = Field(
        60.0,
        alias="GEMINI_REQUEST_TIMEOUT_SECONDS",
        gt=0,
        description="Upper bound for a single generate_content call.",
    )
    input_cost_per_million: float = Field(
        0.075,
        alias="GEMINI_INPUT_COST_PER_MILLION",
        ge=0,
        description="Billing rate for one million prompt tokens.",
    )
    output_cost_per_million: float = Field(
        0.30,
        alias="GEMINI_OUTPUT_COST_PER_MILLION",
        ge=0,
        description="Billing rate for one million completion tokens.",
    )

    @field_validator("model_name")
    @classmethod
    def _strip_model_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("GEMINI_MODEL_NAME must not be blank")
        return cleaned


class RateLimitSettings(BaseSettings):
    """Per-user quota applied to AI analysis requests."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    max_requests: int = Field(5, alias="RATE_LIMIT_MAX_REQUESTS", gt=0)
    window_seconds: float = Field(3600.0, alias="RATE_LIMIT_WINDOW_SECONDS", gt=0)


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    database_path: str = Field(
        "data/offer_insights.db",
        alias="DATABASE_PATH",
        description="SQLite file holding offers, benchmarks, and AI reports.",
    )
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GeminiSettings",
    "RateLimitSettings",
    "get_settings",
]

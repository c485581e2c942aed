"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LLM_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.0-flash:generateContent"
)


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    llm_api_key: str
    llm_api_url: str = Field(
        default=DEFAULT_LLM_API_URL,
        description="generateContent endpoint the prompts are posted to.",
    )
    llm_timeout_seconds: float = Field(default=5.0, gt=0)

    database_url: str = Field(
        default="sqlite:///./data/fitness_advisor.db",
        description="SQLAlchemy-compatible database URL.",
    )
    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    queue_partitions: int = Field(default=4, ge=1)
    worker_poll_seconds: int = Field(default=5, ge=1)
    worker_batch_size: int = Field(default=50, ge=1)
    worker_lock_dir: Path = Field(default=Path(".locks"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("llm_api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        """Ensure the model API key is not left as a placeholder."""

        if value.strip().lower() in {"", "change-me", "changeme"}:
            raise ValueError(
                "LLM_API_KEY is required. Update your .env file with a real key before running the worker."
            )
        return value.strip()

    @field_validator("llm_api_url")
    @classmethod
    def validate_api_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("LLM_API_URL must be an http(s) URL")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings

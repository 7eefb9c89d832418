"""
Application Configuration Module
Handles environment variable loading and application settings.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    # Scoring backend. Without a key every answer is scored by the local heuristic.
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.3
    gemini_max_output_tokens: int = 1024
    scoring_timeout_seconds: float = 20.0  # Per attempt, retries included separately

    # Persistence: directory of JSON session snapshots, in-memory when unset
    session_store_dir: Optional[str] = None

    # HTTP
    cors_allow_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = ""  # "json" for structured output

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def llm_scoring_enabled(self) -> bool:
        return bool(self.gemini_api_key)

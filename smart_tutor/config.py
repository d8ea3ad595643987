"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Question generation (OpenAI-compatible chat completions)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None
    generation_timeout_seconds: float = 15.0
    generation_max_tokens: int = 1000
    generation_temperature: float = 0.7

    # Practice sessions
    session_completion_threshold: int = 10
    default_subject: str = "cpp"
    session_idle_ttl_seconds: float = 3600.0  # Untouched sessions are evicted after this long
    max_live_sessions: int = 1000
    question_bank_path: Optional[str] = None  # JSON bank overriding the built-in pools
    session_idle_ttl_seconds: float = 3600.0  # Sessions untouched this long are evicted
    max_live_sessions: int = 1000

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # API Settings
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Smart Tutor Practice Engine"
    version: str = "1.0.0"

    @property
    def generation_configured(self) -> bool:
        """True when a real (non-placeholder) API key is set."""
        key = (self.openai_api_key or "").strip()
        return bool(key) and not key.startswith("sk-your-")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""Configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Groq (OpenAI-compatible endpoint, preferred provider)
    groq_api_key: Optional[str] = None
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1")
    groq_model: str = Field(default="llama-3.3-70b-versatile")

    # Anthropic (fallback provider)
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = Field(default="claude-sonnet-4-20250514")

    # Seconds to wait for a categorization before giving up; None waits forever
    classifier_timeout: Optional[float] = Field(default=20.0)

    # Data storage
    data_dir: Path = Field(default=Path("data"))
    entries_key: str = Field(default="tracking_entries")
    insight_key: str = Field(default="health_summary")
    chat_key: str = Field(default="chat_messages")

    log_level: str = Field(default="INFO")

    @property
    def has_groq(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def has_claude(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def is_configured(self) -> bool:
        return self.has_groq or self.has_claude

    @property
    def db_path(self) -> Path:
        """Path to the TinyDB file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / "tracking.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

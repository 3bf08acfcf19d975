"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./storybeat.db",
        description="SQLAlchemy connection string for project snapshots",
    )

    # Local media storage (narration audio)
    storage_path: str = Field(
        default="./storage",
        description="Base directory for locally stored media",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    api_reload: bool = Field(default=False, description="Enable auto-reload for development")

    # Providers
    llm_provider: str = Field(
        default="stub",
        description="LLM provider for script authoring (openai, stub)",
    )
    image_gen_provider: str = Field(
        default="stub",
        description="AI image generation provider (dalle3, stub)",
    )
    stock_provider: str = Field(
        default="stub",
        description="Stock media search provider (pexels, stub)",
    )
    voiceover_provider: str = Field(
        default="stub",
        description="Narration provider (elevenlabs, stub)",
    )

    # API Keys (optional, for real providers)
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used for script generation",
    )
    pexels_api_key: str | None = Field(default=None, description="Pexels API key")
    elevenlabs_api_key: str | None = Field(default=None, description="ElevenLabs API key")
    elevenlabs_voice_id: str | None = Field(
        default=None,
        description="ElevenLabs voice ID or alias (narrator, dramatic, energetic, deep)",
    )

    # Composition
    default_ai_aggressiveness: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Initial AI aggressiveness (0.0-1.0) for new projects",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        description="Maximum concurrent per-beat calls for voice and composition fan-out",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


# Convenience alias
settings = get_settings()

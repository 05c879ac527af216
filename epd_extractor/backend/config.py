"""
Application configuration using Pydantic Settings.

Automatically loads environment variables from .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM credentials (Azure deployments export AZURE_OPENAI_API_KEY)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "azure_openai_api_key"),
    )
    openai_model: str = "gpt-4.1-mini"

    # Azure OpenAI (optional - plain OpenAI is used when no endpoint is set)
    azure_openai_endpoint: str | None = None
    azure_openai_api_version: str = "2024-02-15-preview"

    # Completion parameters
    llm_max_tokens: int = 4000
    llm_temperature: float = 0.1

    # CORS
    cors_origins: list[str] = ["*"]

    # Debug flags
    debug: bool = False

    model_config = SettingsConfigDict(
        # Load from .env file in the backend directory
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        # Case insensitive environment variable names
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()

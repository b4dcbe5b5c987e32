"""
Application configuration using pydantic-settings.

Loads configuration from environment variables and .env files.
"""

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
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./mock_interviews.db",
        description="SQLAlchemy async connection string for the session store",
    )

    # Text generator (Ollama)
    llm_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server",
    )
    llm_model_name: str = Field(
        default="gpt-oss:20b",
        description="Ollama model name to use",
    )
    llm_temperature: float = Field(
        default=0.5,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for question and feedback generation",
    )
    llm_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Timeout in seconds for a single text generator call",
    )

    # Assessment extraction
    assessment_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Generator attempts before falling back to heuristic scoring",
    )
    assessment_retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Fixed delay in seconds between extraction attempts",
    )

    # Application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()

"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Bolt Assistant"
    environment: str = "development"
    log_level: str = "debug"
    debug: bool = True

    # Completion endpoint (OpenAI-compatible)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    max_tokens: int = 300
    request_timeout: float = 30.0

    # Session storage
    session_backend: Literal["memory", "mongodb"] = "memory"
    mongodb_uri: str = "mongodb://mongodb:27017"
    mongodb_database: str = "bolt_assistant"

    # CORS
    frontend_url: str = "http://localhost:8081"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency for injecting settings."""
    return settings

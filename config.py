"""Configuration settings using pydantic-settings."""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram Bot
    BOT_TOKEN: str = Field(default="", description="Telegram Bot API token")

    # Quiz API (provider + checker)
    QCM_API_URL: str = Field(
        default="http://localhost:8080",
        description="Base URL serving /api/qcm and /api/check"
    )
    QCM_TIMEOUT: int = Field(default=10, description="API request timeout in seconds")

    # Quiz flow
    ADVANCE_DELAY_SECONDS: float = Field(
        default=2.0,
        description="How long the correction stays visible before the next question"
    )
    DEFAULT_QUESTION_COUNT: int = Field(
        default=10,
        description="Question count offered when the available total is unknown"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()

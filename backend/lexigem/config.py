"""
Configuration module for the LexiGem backend.

This module contains all configuration settings, environment variables,
and application constants used throughout the backend application.

Author: LexiGem Team
Version: 1.0.0
"""

from typing import List, Optional
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lexigem.exceptions import ConfigurationError


DEFAULT_SECRET_KEY = "your-super-secret-key-change-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This class uses pydantic-settings to automatically load
    configuration from environment variables with type validation
    and default values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "LexiGem"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # Database settings
    database_url: str = "sqlite:///./lexigem.db"
    database_echo: bool = False

    # Security settings
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Gemini settings
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-pro"
    gemini_chat_model: str = "gemini-2.5-flash"

    # File upload settings
    upload_dir: str = "uploads"
    max_file_size: int = 50 * 1024 * 1024  # 50MB
    allowed_file_types: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "image/png",
        "image/jpeg",
        "image/webp",
    ]
    public_base_url: str = "http://localhost:8000"

    # CORS settings
    cors_origins: str = "*"
    cors_allow_credentials: bool = True

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Validate and set default database URL if not provided."""
        if not v:
            return "sqlite:///./lexigem.db"
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_environments = ["development", "staging", "production"]
        if v not in allowed_environments:
            raise ValueError(f"Environment must be one of: {allowed_environments}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    @property
    def cors_origin_list(self) -> List[str]:
        """Parse CORS origins from the comma separated setting."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching.

    This function uses LRU cache to ensure settings are loaded only once
    and reused throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


def validate_settings(config: Settings) -> None:
    """
    Check that every credential the service needs at runtime is present.

    Called once from the application lifespan so a misconfigured deployment
    fails at startup with a clear message instead of on the first request.

    Args:
        config (Settings): Settings to check

    Raises:
        ConfigurationError: If one or more required settings are missing
    """
    missing = []

    if not config.gemini_api_key:
        missing.append("GEMINI_API_KEY")

    if config.environment == "production" and config.secret_key == DEFAULT_SECRET_KEY:
        missing.append("SECRET_KEY")

    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}"
        )


# Application constants
class Constants:
    """Application-wide constants."""

    # Storage
    FILES_ROUTE = "/files"

    # Analysis messages
    ANALYSIS_FAILED_MESSAGE = (
        "Failed to analyze the document. The AI model could not process the request. "
        "Please ensure you've uploaded a clear document (PDF, DOCX, PNG, JPG)."
    )
    NO_FILE_MESSAGE = "Please upload a document to analyze."
    ANALYSIS_IN_PROGRESS_MESSAGE = "An analysis is already in progress. Please wait for it to finish."
    CHAT_FAILED_MESSAGE = (
        "Sorry, I couldn't get an answer right now. Please try asking again."
    )

    DISCLAIMER = (
        "This is an AI-generated summary for informational purposes only "
        "and does not constitute legal advice."
    )


# Export settings instance for easy importing
settings = get_settings()

"""
Configuration settings for the retry middleware.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "HTTP Retry Middleware"
    APP_VERSION: str = "0.2.1"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry ===
    RETRY_MAX_RETRIES: int = 3  # Re-sends after the initial request
    RETRY_FALLBACK_INTERVAL: int = 1  # seconds, used when no interval can be determined
    RETRY_STATUS_CODES: list[int] = [429, 408]

    # === Backoff Policy (ExponentialBackoff) ===
    BACKOFF_MIN_INTERVAL: float = 1.0  # seconds
    BACKOFF_MAX_INTERVAL: float = 1800.0  # seconds (30 min)
    BACKOFF_EXPONENT: int = 3
    BACKOFF_MAX_N_RETRIES: int = 3
    BACKOFF_JITTER: bool = True

    # === HTTP Client ===
    HTTP_TIMEOUT: int = 30  # seconds
    HTTP_MAX_CONNECTIONS: int = 10
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 5

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()

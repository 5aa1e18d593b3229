"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote analysis service
    service_base_url: str = "http://localhost:5001"
    health_path: str = "/health"
    upload_path: str = "/upload"
    chat_path: str = "/chat"

    # Timeouts (seconds)
    health_timeout_seconds: float = 2.0
    upload_timeout_seconds: float = 30.0
    request_timeout_seconds: float = 60.0

    # Retry policy for response-less failures
    retry_attempts: int = 3
    retry_backoff_seconds: float = 1.0

    # Origin presented to the service; empty disables the check
    client_origin: str = ""

    serialize_inquiries: bool = True

    # General
    environment: str = "development"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()

"""Configuration management for the shortlinks service."""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=5000,
        description="Port to listen on"
    )

    workers: int = Field(
        default=1,
        ge=1,
        le=1,
        description="Number of uvicorn worker processes. The store lives in process memory, so only 1 is supported."
    )

    environment: str = Field(
        default="development",
        description="Deployment environment (development or production)"
    )

    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed by CORS"
    )

    # URL shortener settings
    base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL for generating short links"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for short links (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=6,
        ge=3,
        le=20,
        description="Length of generated short codes"
    )

    max_generation_attempts: int = Field(
        default=10,
        ge=1,
        description="Attempts at the default length before escalating short code generation"
    )

    default_validity_minutes: int = Field(
        default=30,
        ge=1,
        le=525600,
        description="Validity applied when a request does not specify one"
    )

    # Persistence settings
    snapshot_enabled: bool = Field(
        default=True,
        description="Persist the store to a JSON snapshot file"
    )

    snapshot_path: str = Field(
        default="data/urls.json",
        description="Snapshot file path"
    )

    snapshot_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single snapshot read or write"
    )

    # Cleanup settings
    cleanup_interval_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Interval between expired URL sweeps"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        """Lower-case the environment name."""
        return v.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_config(**overrides) -> Config:
    """Load configuration from environment."""
    return Config(**overrides)

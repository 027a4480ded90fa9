"""Settings configuration for the agent chat service."""

from typing import Optional

from dotenv import load_dotenv
from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Settings
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Database
    database_url: Optional[str] = Field(
        default=None, description="PostgreSQL connection URL (postgresql+asyncpg://...)"
    )
    database_pool_size: int = Field(default=5, ge=1, le=50)
    database_pool_overflow: int = Field(default=10, ge=0, le=100)

    # JWT Authentication (session tokens issued by the dashboard)
    jwt_secret_key: Optional[str] = Field(default=None, description="Secret key for JWT signing")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")

    # Stored API connection keys
    api_key_encryption_key: Optional[str] = Field(
        default=None,
        description="AES-256-GCM key for stored API connection keys (at least 32 characters)",
    )

    # Upstream providers
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", description="Base URL for the OpenAI API"
    )
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com", description="Base URL for the Anthropic API"
    )
    anthropic_version: str = Field(
        default="2023-06-01", description="Value sent in the anthropic-version header"
    )
    provider_timeout_seconds: float = Field(
        default=60.0, gt=0, description="Connect/read timeout for upstream provider calls"
    )
    default_model: str = Field(
        default="gpt-3.5-turbo", description="Model used when an agent has none configured"
    )

    # Credential resolution
    credential_fallback_enabled: bool = Field(
        default=True,
        description=(
            "Use the owner's first API connection when no service label matches the "
            "agent's provider"
        ),
    )

    # CORS
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], description="CORS allowed origins"
    )


def load_settings() -> Settings:
    """Load settings with proper error handling."""
    try:
        return Settings()
    except Exception as e:
        error_msg = f"Failed to load settings: {e}"
        if "database_url" in str(e).lower():
            error_msg += "\nMake sure DATABASE_URL in your .env file is a valid URL"
        raise ValueError(error_msg) from e

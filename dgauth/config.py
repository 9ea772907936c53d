"""Configuration loading for the dgauth storage adapter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Dgraph connection
    dgraph_endpoint: str = Field(
        default="http://localhost:8080/graphql",
        description="Dgraph GraphQL endpoint URL",
    )
    dgraph_admin_url: str = Field(
        default="",
        description="Dgraph admin schema URL (derived from the endpoint when empty)",
    )
    dgraph_auth_token: str = Field(
        default="",
        description="Dgraph API key sent as X-Auth-Token",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
    )

    # JWT signing for the secure schema
    dgraph_jwt_secret: str = Field(
        default="",
        description="JWT signing key (HS256 secret or RS256 PEM private key)",
    )
    dgraph_jwt_algorithm: Literal["HS256", "RS256"] = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    dgraph_auth_header: str = Field(
        default="Authorization",
        description="Header carrying the JWT",
    )
    dgraph_jwt_namespace: str = Field(
        default="",
        description="Namespace the JWT claims are nested under",
    )
    dgraph_jwt_verification_key: str = Field(
        default="",
        description="Key Dgraph verifies the JWT with (HS256 secret or RS256 PEM public key)",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["cli", "load_schema"] = Field(
        default="cli",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @property
    def secure(self) -> bool:
        """Whether requests are signed for the secure schema."""
        return bool(self.dgraph_jwt_secret)

    @field_validator("dgraph_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Ensure the endpoint is an HTTP(S) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("dgraph_endpoint must be an http(s) URL")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure the request timeout is positive."""
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("dgraph_jwt_secret", "dgraph_jwt_verification_key")
    @classmethod
    def unescape_newlines(cls, v: str) -> str:
        """Turn literal ``\\n`` sequences into newlines for single-line PEM keys."""
        return v.replace("\\n", "\n")


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]

"""Application configuration using Pydantic Settings.

Reads configuration from environment variables with sensible defaults.
The backend anon key should be provided via environment variables.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # =========================================================================
    # Managed backend (REST + auth)
    # =========================================================================
    backend_url: str = Field(
        default="http://localhost:54321",
        description="Base URL of the managed backend project",
    )
    backend_anon_key: str = Field(
        default="",
        description="Public anon key sent as apikey header",
    )
    backend_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Backend request timeout in seconds",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rest_url(self) -> str:
        """Row-level REST endpoint root."""
        return f"{self.backend_url.rstrip('/')}/rest/v1"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def auth_url(self) -> str:
        """Auth endpoint root."""
        return f"{self.backend_url.rstrip('/')}/auth/v1"

    # =========================================================================
    # Cart
    # =========================================================================
    cart_storage_path: str = Field(
        default="./.storefront/drippss-cart.json",
        description="File the cart line items are persisted to",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Output logs as JSON outside dev",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Shared configuration management for the character proxy.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


Variant = Literal["greeting", "proxy", "cached"]


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHARACTERS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Which incremental version of the service to run
    variant: Variant = Field(default="cached")

    # External services
    upstream_base_url: str = Field(default="https://rickandmortyapi.com/api")
    redis_url: str = Field(default="redis://localhost:6379/0")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "characters"
    host: str = "0.0.0.0"
    port: int = 3000
    greeting: str = "Hello World"

    @property
    def cache_enabled(self) -> bool:
        return self.variant == "cached"

    @property
    def proxy_enabled(self) -> bool:
        return self.variant in ("proxy", "cached")


def get_config(**overrides) -> ServiceConfig:
    """Get configuration for the service, applying explicit overrides."""
    return ServiceConfig(**overrides)

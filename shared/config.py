"""
Shared configuration management for the identity SDK.
"""

from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IdentitySettings(BaseSettings):
    """SDK settings, read from ``IDENTITY_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="IDENTITY_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    log_level: str = Field(default="info")

    # Remote API
    base_url: str = Field(default="https://api.stormpath.com/v1")
    api_key_id: Optional[str] = Field(default=None)
    api_key_secret: Optional[str] = Field(default=None)
    http_timeout: float = Field(default=10.0)
    http_max_attempts: int = Field(default=3)

    # Resource cache
    cache_store: str = Field(default="memory")
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="identity_sdk")
    cache_ttl: int = Field(default=300)
    cache_tti: int = Field(default=300)
    cache_regions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    # Token issuance and validation
    access_token_ttl: int = Field(default=3600)
    admin_directory_name: str = Field(default="Stormpath Administrators")


def get_settings(**overrides) -> IdentitySettings:
    """Build settings for one client instance."""
    return IdentitySettings(**overrides)

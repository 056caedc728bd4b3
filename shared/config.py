"""
Shared configuration management for the Lisk access layer.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LiskSettings(BaseSettings):
    """Settings for the cached Lisk client, read from ``LISK_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="LISK_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Remote service
    api_base: str = Field(default="http://localhost:8000/api/v1")
    api_key: Optional[SecretStr] = Field(default=None)
    request_timeout: float = Field(default=10.0)
    require_credential: bool = Field(default=True)

    # Cache
    cache_backend: str = Field(default="memory")
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_max_age: float = Field(default=60.0)
    cache_retention: float = Field(default=86400.0)

    # Transient status
    status_clear_after: float = Field(default=3.0)
    cache_cleared_window: float = Field(default=1.5)

    @property
    def credential(self) -> Optional[str]:
        """Plain credential string, or None when unset or blank."""
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value() or None


def get_settings(**overrides) -> LiskSettings:
    """Get settings, with keyword overrides taking precedence over the environment."""
    return LiskSettings(**overrides)

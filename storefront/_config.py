"""
Configuration — environment-driven settings.

    config = StorefrontConfig()                       # STOREFRONT_* env / .env
    config = StorefrontConfig(secret_key="...", access_token_expiration=15)

Note: passed explicitly into every constructor. There is no module-level
instance; tests and embedders build their own.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SECRET_KEY = "Storefront-SecretKey-For-JWT-Token-Generation"


class StorefrontConfig(BaseSettings):
    """Storefront API settings."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    # API
    enabled: bool = True
    api_prefix: str = ""

    # Tokens
    secret_key: str = Field(default=DEFAULT_SECRET_KEY, min_length=32)
    valid_issuer: str = "Storefront-Api"
    valid_audience: str = "Storefront-Api"
    validate_issuer: bool = True
    validate_audience: bool = True
    access_token_expiration: int = Field(default=60, gt=0)  # minutes
    refresh_token_expiration: int = Field(default=10080, gt=0)  # minutes

    # Login lockout (0 disables)
    max_failed_login_attempts: int = Field(default=0, ge=0)
    lockout_minutes: int = Field(default=30, gt=0)

    # Checkout
    currency: str = "USD"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.access_token_expiration)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.refresh_token_expiration)

    @property
    def lockout_window(self) -> timedelta:
        return timedelta(minutes=self.lockout_minutes)


__all__ = (
    "DEFAULT_SECRET_KEY",
    "StorefrontConfig",
)

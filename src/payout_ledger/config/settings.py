"""Configuration settings for payout-ledger."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Stripe
    stripe_secret_key: SecretStr = Field(..., validation_alias="STRIPE_SECRET_KEY")
    stripe_api_url: str = Field(
        default="https://api.stripe.com", validation_alias="STRIPE_API_URL"
    )

    # Wave
    wave_graphql_endpoint: str = Field(
        default="https://gql.waveapps.com/graphql/public",
        validation_alias="WAVE_GRAPHQL_ENDPOINT",
    )
    wave_full_access_token: SecretStr = Field(
        ..., validation_alias="WAVE_FULL_ACCESS_TOKEN"
    )
    # Prepended to the payout id to form the Wave externalId
    wave_prefix: str = Field(default="", validation_alias="WAVE_PREFIX")
    sales_tax_id: str | None = Field(default=None, validation_alias="SALES_TAX_ID")

    http_timeout: float = Field(default=30.0, validation_alias="HTTP_TIMEOUT")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()

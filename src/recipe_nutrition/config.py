"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_timeout_seconds: float = Field(default=10.0, gt=0)
    lookup_max_retries: int = Field(default=3, ge=0)
    lookup_initial_delay_seconds: float = Field(default=1.0, ge=0)
    lookup_max_delay_seconds: float = Field(default=10.0, ge=0)
    lookup_cache_ttl_seconds: int = 86400
    default_serving_size_grams: float = Field(default=100.0, gt=0)
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

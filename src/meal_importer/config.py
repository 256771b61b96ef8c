"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    nutritionix_app_id: str
    nutritionix_api_key: str
    nutritionix_base_url: str = "https://trackapi.nutritionix.com/v2"
    nutrition_cache_ttl_seconds: int = 86400
    nutrition_cache_max_entries: int = 2048
    nutrition_debug: bool = False
    import_concurrency: int = 4
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

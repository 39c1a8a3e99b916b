"""
FoodieBuddy - Configuration and settings.

Settings are read from the environment (and .env) on first access,
never at import time.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Supabase credentials are required; everything else has a default
    suitable for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str
    supabase_anon_key: str

    # Backing table for fridge + grocery list rows
    owned_ingredients_table: str = "owned_ingredients"

    # Application
    foodiebuddy_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Dev user used by the CLI
    dev_user_id: str = "00000000-0000-0000-0000-000000000002"

    @property
    def is_development(self) -> bool:
        return self.foodiebuddy_env == "development"

    @property
    def is_production(self) -> bool:
        return self.foodiebuddy_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()

"""
FrisFocus - Configuration and settings.

Settings are read from the environment (and .env) on first access only,
so importing this module never requires Supabase credentials.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Application
    frisfocus_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Onboarding tour
    onboarding_save_debounce_seconds: float = 0.5  # Batches immediate-trigger advances
    onboarding_progress_table: str = "onboarding_progress"
    onboarding_reward_event: str = "completed_onboarding_tutorial"

    @property
    def is_development(self) -> bool:
        return self.frisfocus_env == "development"

    @property
    def is_production(self) -> bool:
        return self.frisfocus_env == "production"


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

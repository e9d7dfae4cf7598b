"""
Centralized configuration for the Aqua Farm Ledger backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, LEDGER_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Aqua Farm Ledger"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Session controller timeouts (seconds)
    identity_check_timeout: float = 10.0
    profile_fetch_timeout: float = 5.0
    profile_fetch_ceiling: float = 10.0
    sign_out_timeout: float = 10.0
    profile_update_timeout: float = 10.0

    # Ledger
    ledger_cache_ttl: int = 300  # seconds
    category_colors: list[str] = [
        "#2196F3",
        "#009688",
        "#4CAF50",
        "#FF9800",
        "#9C27B0",
        "#F44336",
        "#795548",
    ]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

"""Tests for shared/config.py."""

import os
from unittest.mock import patch

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)
        assert settings.app_name == "Aqua Farm Ledger"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_timeout_defaults(self):
        """Session timeouts default to the documented values."""
        settings = Settings(_env_file=None)
        assert settings.identity_check_timeout == 10.0
        assert settings.profile_fetch_timeout == 5.0
        assert settings.profile_fetch_ceiling == 10.0
        assert settings.sign_out_timeout == 10.0
        assert settings.profile_update_timeout == 10.0

    def test_ledger_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.ledger_cache_ttl == 300
        assert len(settings.category_colors) == 7

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "PROFILE_FETCH_TIMEOUT": "2.5"}):
            settings = Settings(_env_file=None)
            assert settings.debug is True
            assert settings.profile_fetch_timeout == 2.5

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_ANON_KEY": "test-anon-key",
        }):
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_anon_key == "test-anon-key"


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        get_settings.cache_clear()
        assert isinstance(get_settings(), Settings)

    def test_get_settings_caches(self):
        """get_settings should return cached instance."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2

"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from src.config.settings import Settings, get_settings
from src.notifications.config import NotificationConfig


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CLIENT_HOST", raising=False)
        settings = Settings(_env_file=None)
        assert settings.client_host == "http://localhost:3001"
        assert settings.api_port == 8001
        assert not settings.is_production

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CLIENT_HOST", "https://app.example.com")
        monkeypatch.setenv("ENCRYPTION_SECRET", "s3cr3t")
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings = Settings(_env_file=None)
        assert settings.client_host == "https://app.example.com"
        assert settings.encryption_secret == "s3cr3t"
        assert settings.is_production

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, encryption_secret="")

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()


class TestNotificationConfig:

    def test_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATIONS_TECH_DEBT_TOPIC", "debt_events")
        monkeypatch.setenv("NOTIFICATIONS_ENABLED", "false")
        config = NotificationConfig()
        assert config.tech_debt_topic == "debt_events"
        assert config.enabled is False

    def test_defaults(self):
        config = NotificationConfig()
        assert config.tech_debt_topic == "tech_debt_created"
        assert config.max_stream_length == 100_000

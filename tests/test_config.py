"""Tests for apirepo.config module."""

import pytest
from pydantic import SecretStr

from apirepo.config import AppSettings, CacheConfig


class TestCacheConfig:
    def test_as_kwargs_drops_unsupported_entries(self):
        config = CacheConfig(ttl=10, namespace="apirepo", key_builder=lambda *a: "k")

        assert config.as_kwargs() == {"ttl": 10, "namespace": "apirepo"}


class TestAppSettings:
    """Test suite for AppSettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("APIREPO_REQUEST_TIMEOUT", raising=False)
        monkeypatch.delenv("APIREPO_MAX_RETRIES", raising=False)

        settings = AppSettings(_env_file=None)

        assert settings.APIREPO_REQUEST_TIMEOUT == 60.0
        assert settings.APIREPO_MAX_RETRIES == 3

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("APIREPO_MAX_RETRIES", "5")
        monkeypatch.setenv("APIREPO_API_KEY", "from-env")

        settings = AppSettings(_env_file=None)

        assert settings.APIREPO_MAX_RETRIES == 5
        assert isinstance(settings.APIREPO_API_KEY, SecretStr)
        assert settings.get_secret("APIREPO_API_KEY") == "from-env"

    def test_settings_are_frozen(self):
        settings = AppSettings(_env_file=None)

        with pytest.raises(Exception):
            settings.APIREPO_MAX_RETRIES = 1

    def test_get_secret_errors(self, monkeypatch):
        monkeypatch.delenv("APIREPO_API_KEY", raising=False)
        settings = AppSettings(_env_file=None)

        with pytest.raises(ValueError):
            settings.get_secret("APIREPO_API_KEY")
        with pytest.raises(AttributeError):
            settings.get_secret("NOPE")

"""
Unit tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from popcorn_api.core.config import DEFAULT_CACHE_TTL_SECONDS, Settings


class TestCorsOrigins:
    def test_comma_separated_env_value(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://a.example, http://b.example,")
        settings = Settings(_env_file=None)
        assert settings.BACKEND_CORS_ORIGINS == ["http://a.example", "http://b.example"]

    def test_single_origin(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://localhost:3000")
        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == ["http://localhost:3000"]

    def test_json_list_env_value(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", '["http://a.example", "http://b.example"]')
        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == ["http://a.example", "http://b.example"]

    def test_malformed_json_is_rejected(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "[not json")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_default_allows_any_origin(self, monkeypatch):
        monkeypatch.delenv("BACKEND_CORS_ORIGINS", raising=False)
        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == ["*"]


def test_cache_ttl_defaults_to_one_day(monkeypatch):
    monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
    assert Settings(_env_file=None).CACHE_TTL_SECONDS == DEFAULT_CACHE_TTL_SECONDS == 86400

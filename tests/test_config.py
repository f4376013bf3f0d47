"""Tests for environment-driven settings."""
from config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        monkeypatch.delenv("ID_STRATEGY", raising=False)
        settings = Settings(_env_file=None)

        assert settings.storage_backend == "file"
        assert settings.storage_key == "scheduleData"
        assert settings.id_strategy == "sequential"
        assert settings.currency_symbol == "R$"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("CLINIC_TIMEZONE", "America/Sao_Paulo")
        monkeypatch.setenv("SESSION_TTL_HOURS", "8")
        monkeypatch.setenv("CURRENCY_DECIMAL_COMMA", "false")
        settings = Settings(_env_file=None)

        assert settings.storage_backend == "memory"
        assert settings.clinic_timezone == "America/Sao_Paulo"
        assert settings.session_ttl_hours == 8
        assert settings.currency_decimal_comma is False

"""Tests for config.py."""
import pytest
from pydantic import ValidationError

import config
from config import Settings, get_settings, reset_settings, validate_required_settings
from shared.utils.exceptions import ConfigurationException


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings()
    yield
    reset_settings()


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OPENAI_MODEL", raising=False)
        monkeypatch.delenv("LLM_MAX_RETRIES", raising=False)
        monkeypatch.delenv("LLM_TIMEOUT_SECONDS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.openai_model == "gpt-4o"
        assert settings.llm_timeout_seconds == 60
        assert settings.llm_max_retries == 1
        assert settings.api_port == 8000

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("LLM_MAX_RETRIES", "3")
        settings = Settings(_env_file=None)
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.llm_max_retries == 3

    def test_retry_budget_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, llm_max_retries=0)


class TestGetSettings:

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset(self):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
        assert config._settings is not None


class TestValidateRequiredSettings:

    def test_valid(self):
        settings = Settings(_env_file=None, openai_api_key="sk-test", database_url="sqlite:///:memory:")
        assert validate_required_settings(settings) is True

    def test_missing_api_key(self):
        settings = Settings(_env_file=None, openai_api_key="", database_url="sqlite:///:memory:")
        with pytest.raises(ConfigurationException) as exc_info:
            validate_required_settings(settings)
        assert exc_info.value.config_key == "openai_api_key"

    def test_missing_database_url(self):
        settings = Settings(_env_file=None, openai_api_key="sk-test", database_url="")
        with pytest.raises(ConfigurationException) as exc_info:
            validate_required_settings(settings)
        assert exc_info.value.config_key == "database_url"

    def test_empty_model(self):
        settings = Settings(_env_file=None, openai_api_key="sk-test", openai_model="")
        with pytest.raises(ConfigurationException) as exc_info:
            validate_required_settings(settings)
        assert exc_info.value.config_key == "openai_model"

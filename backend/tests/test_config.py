"""
Configuration tests.

Coverage:
  - load_settings reads every recognised environment variable
  - Defaults when variables are unset or blank
  - email_configured / enrichment_configured flags
"""

import pytest

from app.config import (
    DEFAULT_ANTHROPIC_MODEL,
    DEFAULT_FROM_EMAIL,
    Settings,
    load_settings,
)

_ALL_VARS = [
    "SENDGRID_API_KEY", "TO_EMAIL", "FROM_EMAIL",
    "ANTHROPIC_API_KEY", "ANTHROPIC_MODEL",
    "BUSINESS_NAME", "BUSINESS_PHONE", "BUSINESS_WEBSITE",
    "BUSINESS_SERVICE_AREA", "BUSINESS_TIMEZONE",
]


@pytest.fixture()
def clean_env(monkeypatch):
    for name in _ALL_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadSettings:

    def test_defaults_with_empty_environment(self, clean_env):
        settings = load_settings()

        assert settings.sendgrid_api_key is None
        assert settings.to_email is None
        assert settings.from_email == DEFAULT_FROM_EMAIL == "noreply@kryshvac.com.au"
        assert settings.anthropic_api_key is None
        assert settings.anthropic_model == DEFAULT_ANTHROPIC_MODEL
        assert settings.business.name == "Krysh HVAC"
        assert settings.business.timezone == "Australia/Melbourne"
        assert not settings.email_configured
        assert not settings.enrichment_configured

    def test_reads_every_variable(self, clean_env):
        clean_env.setenv("SENDGRID_API_KEY", "SG.key")
        clean_env.setenv("TO_EMAIL", "office@coolair.example")
        clean_env.setenv("FROM_EMAIL", "web@coolair.example")
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant")
        clean_env.setenv("ANTHROPIC_MODEL", "claude-sonnet-4-5")
        clean_env.setenv("BUSINESS_NAME", "Cool Air Co")
        clean_env.setenv("BUSINESS_PHONE", "03 9000 0000")
        clean_env.setenv("BUSINESS_WEBSITE", "https://coolair.example")
        clean_env.setenv("BUSINESS_SERVICE_AREA", "Geelong")
        clean_env.setenv("BUSINESS_TIMEZONE", "Australia/Perth")

        settings = load_settings()

        assert settings.sendgrid_api_key == "SG.key"
        assert settings.to_email == "office@coolair.example"
        assert settings.from_email == "web@coolair.example"
        assert settings.anthropic_api_key == "sk-ant"
        assert settings.anthropic_model == "claude-sonnet-4-5"
        assert settings.business.name == "Cool Air Co"
        assert settings.business.phone == "03 9000 0000"
        assert settings.business.website == "https://coolair.example"
        assert settings.business.service_area == "Geelong"
        assert settings.business.timezone == "Australia/Perth"
        assert settings.email_configured
        assert settings.enrichment_configured

    def test_blank_values_count_as_unset(self, clean_env):
        clean_env.setenv("SENDGRID_API_KEY", "   ")
        clean_env.setenv("TO_EMAIL", "office@kryshvac.com.au")
        clean_env.setenv("FROM_EMAIL", "")

        settings = load_settings()

        assert settings.sendgrid_api_key is None
        assert settings.from_email == DEFAULT_FROM_EMAIL
        assert not settings.email_configured


class TestSettingsFlags:

    @pytest.mark.parametrize("key,to,expected", [
        ("SG.key", "office@kryshvac.com.au", True),
        ("SG.key", None, False),
        (None, "office@kryshvac.com.au", False),
        (None, None, False),
    ])
    def test_email_configured_needs_key_and_destination(self, key, to, expected):
        assert Settings(sendgrid_api_key=key, to_email=to).email_configured is expected

    def test_settings_are_immutable(self):
        with pytest.raises(Exception):
            Settings().to_email = "someone@example.com"

import dataclasses

import pytest

from jira_timeline.core.config import (
    ISSUE_KEY_PATTERN,
    ConfigurationError,
    JiraSettings,
    load_settings,
    load_settings_from_env,
)


def test_load_settings_from_jira_section():
    settings = load_settings(
        {
            "jira": {
                "JIRA_SERVER": "https://example.atlassian.net/",
                "JIRA_EMAIL": "dev@example.com",
                "JIRA_API_TOKEN": "secret",
                "JIRA_TIMEZONE": "America/Santiago",
            }
        }
    )
    assert settings.server == "https://example.atlassian.net"
    assert settings.email == "dev@example.com"
    assert settings.token == "secret"
    assert settings.timezone == "America/Santiago"
    assert settings.api_version == "3"
    assert settings.log_level == "INFO"


def test_load_settings_top_level_and_token_fallback():
    settings = load_settings(
        {
            "JIRA_SERVER": "https://jira.example.org",
            "JIRA_EMAIL": "dev",
            "JIRA_TOKEN": "legacy",
            "JIRA_API_VERSION": "2",
            "JIRA_LOG_LEVEL": "debug",
        }
    )
    assert settings.token == "legacy"
    assert settings.api_version == "2"
    assert settings.log_level == "DEBUG"
    assert settings.issue_pattern.pattern == ISSUE_KEY_PATTERN


def test_missing_credentials_rejected():
    with pytest.raises(ConfigurationError, match="token"):
        load_settings({"JIRA_SERVER": "https://jira.example.org", "JIRA_EMAIL": "dev"})


def test_settings_are_immutable():
    settings = JiraSettings(server="https://jira.example.org", email="dev", token="t")
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.server = "https://elsewhere"


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("JIRA_SERVER", "https://env.example.org")
    monkeypatch.setenv("JIRA_EMAIL", "env-user")
    monkeypatch.setenv("JIRA_API_TOKEN", "env-token")
    settings = load_settings_from_env()
    assert settings.server == "https://env.example.org"
    assert settings.email == "env-user"

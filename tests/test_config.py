"""
Tests for environment-based settings.
"""

import logging
import os

import pytest

from page_parser.builder import TextPolicy
from page_parser.config import Settings, load_settings
from page_parser.exceptions import ConfigError

ENV_VARS = [
    "PAGE_PARSER_BASE_URL", "PAGE_PARSER_BACKEND", "PAGE_PARSER_TEXT_POLICY",
    "PAGE_PARSER_SANITIZE", "PAGE_PARSER_TIMEOUT", "PAGE_PARSER_USER_AGENT",
    "PAGE_PARSER_LOG_LEVEL", "PAGE_PARSER_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)


def load(**overrides):
    return load_settings(env_file="missing.env", **overrides)


class TestLoadSettings:
    def test_defaults(self):
        settings = load()

        assert settings == Settings()
        assert settings.base_url == "http://thejoeshow.net"
        assert settings.backend == "html.parser"
        assert settings.text_policy is TextPolicy.OVERWRITE
        assert settings.sanitize is False

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_BASE_URL", "http://example.com")
        monkeypatch.setenv("PAGE_PARSER_SANITIZE", "true")
        monkeypatch.setenv("PAGE_PARSER_TEXT_POLICY", "concatenate")
        monkeypatch.setenv("PAGE_PARSER_TIMEOUT", "2.5")
        monkeypatch.setenv("PAGE_PARSER_LOG_LEVEL", "debug")

        settings = load()

        assert settings.base_url == "http://example.com"
        assert settings.sanitize is True
        assert settings.text_policy is TextPolicy.CONCATENATE
        assert settings.timeout == 2.5
        assert settings.log_level == "DEBUG"
        assert settings.log_level_value == logging.DEBUG

    def test_empty_value_is_unset(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_LOG_FILE", "")

        assert load().log_file is None

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_SANITIZE", "true")

        assert load(sanitize=False).sanitize is False
        assert load(sanitize=None).sanitize is True

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("PAGE_PARSER_USER_AGENT=from-file\n")

        try:
            assert load_settings(env_file=str(env_file)).user_agent == "from-file"
        finally:
            # load_dotenv writes into os.environ
            os.environ.pop("PAGE_PARSER_USER_AGENT", None)


class TestValidation:
    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_BACKEND", "regex")

        with pytest.raises(ConfigError) as exc_info:
            load()
        assert exc_info.value.details["errors"][0]["field"] == "backend"

    def test_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_TIMEOUT", "-1")

        with pytest.raises(ConfigError):
            load()

    def test_bad_log_level(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigError):
            load()

    def test_bad_text_policy(self, monkeypatch):
        monkeypatch.setenv("PAGE_PARSER_TEXT_POLICY", "merge")

        with pytest.raises(ConfigError):
            load()

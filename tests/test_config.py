"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from mention_relay.config import ReplyThreadPolicy, get_settings
from mention_relay.prompts import DEFAULT_PERSONA_PROMPT


class TestGetSettings:
    """Tests for get_settings."""

    def test_defaults_when_env_not_set(self, clean_env):
        """Tokens and URLs default to empty; nothing is required."""
        settings = get_settings()

        assert settings.slack_user_token == ""
        assert settings.slack_webhook_url == ""
        assert settings.llm_url == "https://api.openai.com/v1"
        assert settings.llm_model == "gpt-3.5-turbo"
        assert settings.llm_temperature == 1.0
        assert settings.persona_prompt == DEFAULT_PERSONA_PROMPT
        assert settings.actions_enabled is True
        assert settings.reply_thread_policy is ReplyThreadPolicy.PRESERVE
        assert settings.deploy_head_branch == "staging"
        assert settings.deploy_base_branch == "main"
        assert settings.port == 8080

    def test_load_from_env(self, clean_env):
        clean_env.setenv("RELAY_SLACK_USER_TOKEN", "xoxp-test")
        clean_env.setenv("RELAY_LLM_MODEL", "gpt-4o-mini")
        clean_env.setenv("RELAY_LLM_TEMPERATURE", "0.2")
        clean_env.setenv("RELAY_ACTIONS_ENABLED", "false")
        clean_env.setenv("RELAY_REPLY_THREAD_POLICY", "event_ts")
        clean_env.setenv("RELAY_GITHUB_OWNER", "acme")
        clean_env.setenv("RELAY_GITHUB_REPO", "storefront")

        settings = get_settings()

        assert settings.slack_user_token == "xoxp-test"
        assert settings.llm_model == "gpt-4o-mini"
        assert settings.llm_temperature == 0.2
        assert settings.actions_enabled is False
        assert settings.reply_thread_policy is ReplyThreadPolicy.EVENT_TS
        assert settings.github_owner == "acme"
        assert settings.github_repo == "storefront"

    def test_log_level_is_normalized(self, clean_env):
        clean_env.setenv("RELAY_LOG_LEVEL", " debug ")
        assert get_settings().log_level == "DEBUG"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("RELAY_LLM_TEMPERATURE", "2.5"),
            ("RELAY_LLM_TEMPERATURE", "-0.1"),
            ("RELAY_PORT", "0"),
            ("RELAY_PORT", "70000"),
            ("RELAY_LOG_LEVEL", "chatty"),
            ("RELAY_REPLY_THREAD_POLICY", "sideways"),
            ("RELAY_REQUEST_TIMEOUT_SECONDS", "0"),
        ],
    )
    def test_invalid_values_rejected(self, clean_env, name, value):
        clean_env.setenv(name, value)
        with pytest.raises(ValidationError):
            get_settings()

"""Relay configuration using pydantic-settings.

This module defines the RelaySettings class that reads configuration from
environment variables with the RELAY_ prefix. Tokens and URLs have no
presence validation: a missing value makes the corresponding downstream call
fail, which is logged where it happens.
"""

from enum import Enum

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mention_relay.prompts import DEFAULT_PERSONA_PROMPT


class ReplyThreadPolicy(str, Enum):
    """Where the relayed reply is threaded.

    Attributes:
        PRESERVE: Reply in the mention's thread when it has one, otherwise
                  reply in the channel.
        EVENT_TS: Always reply in a thread rooted at the mention itself.
    """

    PRESERVE = "preserve"
    EVENT_TS = "event_ts"


class RelaySettings(BaseSettings):
    """Mention relay configuration from environment variables.

    All environment variables are prefixed with RELAY_ (e.g., RELAY_GITHUB_TOKEN).
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Slack Configuration
    # -------------------------------------------------------------------------
    # User token used for conversations.replies
    slack_user_token: str = ""

    # Incoming webhook URL replies are posted to
    slack_webhook_url: str = ""

    slack_api_base_url: str = "https://slack.com/api"

    # -------------------------------------------------------------------------
    # LLM Configuration
    # -------------------------------------------------------------------------
    # Base URL of the OpenAI-compatible endpoint (without /chat/completions)
    llm_url: str = "https://api.openai.com/v1"

    llm_api_key: str = ""

    llm_model: str = "gpt-3.5-turbo"

    llm_temperature: float = 1.0

    persona_prompt: str = DEFAULT_PERSONA_PROMPT

    # Advertise the deployment PR functions to the model
    actions_enabled: bool = True

    reply_thread_policy: ReplyThreadPolicy = ReplyThreadPolicy.PRESERVE

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    github_token: str = ""

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    github_owner: str = ""

    github_repo: str = ""

    deploy_head_branch: str = "staging"

    deploy_base_branch: str = "main"

    deploy_pr_title: str = "Deploy staging to main"

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    request_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    host: str = "0.0.0.0"

    port: int = 8080

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("llm_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate that temperature is within the OpenAI range."""
        if not 0.0 <= v <= 2.0:
            raise ValueError("llm_temperature must be between 0 and 2")
        return v

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log_level: {v}")
        return level

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


def get_settings() -> RelaySettings:
    """Create and return a RelaySettings instance.

    Returns:
        RelaySettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If a value is present but invalid.
    """
    return RelaySettings()

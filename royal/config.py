"""Royal configuration management."""

import json
import logging
from typing import Optional

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger("royal.config")

DEFAULT_SYSTEM_PROMPT = "You are a helpful Discord assistant. Be concise and accurate."

# Discord caps ban message purges at 7 days
MAX_BAN_DELETE_SECONDS = 604800


class ConfigError(Exception):
    """Fatal configuration problem detected at startup."""
    pass


class RoyalSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Discord
    discord_token: Optional[str] = Field(default=None, description="Discord bot token")
    discord_client_id: Optional[str] = Field(default=None, description="Discord application ID")
    discord_guild_id: Optional[str] = Field(
        default=None,
        description="Guild for fast slash-command sync (global sync if unset)",
    )

    # Completion endpoint — NOVITA_* names are accepted as fallbacks
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "NOVITA_API_KEY"),
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "NOVITA_BASE_URL"),
    )
    openai_api_url: Optional[str] = Field(default=None, description="Full endpoint URL override")
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("OPENAI_MODEL", "NOVITA_MODEL"),
    )
    openai_auth_header: str = Field(default="Authorization")
    openai_auth_prefix: str = Field(default="Bearer", description="Empty string sends the bare key")
    openai_extra_headers: str = Field(default="", description="JSON object of extra request headers")

    # Behaviour
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    request_timeout_ms: int = Field(default=90_000)
    max_history_messages: int = Field(default=30)
    max_history_chars: int = Field(default=12_000)

    # Moderation
    auto_ban_channel_ids: str = Field(default="", description="Comma-separated channel IDs")
    auto_ban_delete_message_seconds: int = Field(default=86_400)

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    model_config = {"env_file": ".env", "extra": "ignore", "populate_by_name": True}

    @field_validator(
        "request_timeout_ms",
        "max_history_messages",
        "max_history_chars",
        "auto_ban_delete_message_seconds",
        mode="before",
    )
    @classmethod
    def _blank_means_default(cls, value, info):
        if isinstance(value, str) and not value.strip():
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("auto_ban_delete_message_seconds")
    @classmethod
    def _clamp_ban_window(cls, value: int) -> int:
        return min(MAX_BAN_DELETE_SECONDS, max(0, value))

    @property
    def request_timeout(self) -> float:
        """Completion request timeout in seconds."""
        return self.request_timeout_ms / 1000

    @property
    def auto_ban_channels(self) -> frozenset[str]:
        return frozenset(
            cid.strip() for cid in self.auto_ban_channel_ids.split(",") if cid.strip()
        )

    @property
    def extra_headers(self) -> dict[str, str]:
        return parse_extra_headers(self.openai_extra_headers)


def parse_extra_headers(raw: Optional[str]) -> dict[str, str]:
    """Parse OPENAI_EXTRA_HEADERS into a header dict.

    Raises:
        ConfigError: if the value is not a JSON object of string → string.
    """
    if not raw or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid OPENAI_EXTRA_HEADERS JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigError("Invalid OPENAI_EXTRA_HEADERS JSON: must be a JSON object")
    for key, value in parsed.items():
        if not isinstance(value, str):
            raise ConfigError(
                f"Invalid OPENAI_EXTRA_HEADERS JSON: value for {key!r} must be a string"
            )
    return parsed


def load_settings(**overrides) -> RoyalSettings:
    """Load and validate settings from the environment.

    Everything that can be checked without touching the network is checked
    here, so a bad deployment fails at startup instead of on the first mention.

    Raises:
        ConfigError: on missing credentials or malformed values.
    """
    try:
        settings = RoyalSettings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e

    missing = [
        name
        for name, value in (
            ("DISCORD_TOKEN", settings.discord_token),
            ("DISCORD_CLIENT_ID", settings.discord_client_id),
            ("OPENAI_API_KEY", settings.openai_api_key),
        )
        if not value
    ]
    if missing:
        raise ConfigError(
            "Missing required env vars. Need: DISCORD_TOKEN, DISCORD_CLIENT_ID, OPENAI_API_KEY "
            f"(missing: {', '.join(missing)})"
        )

    if not settings.discord_client_id.strip().isdigit():
        raise ConfigError("DISCORD_CLIENT_ID must be a numeric application ID")
    if settings.discord_guild_id and not settings.discord_guild_id.strip().isdigit():
        raise ConfigError("DISCORD_GUILD_ID must be a numeric guild ID")
    if settings.request_timeout_ms <= 0:
        raise ConfigError("REQUEST_TIMEOUT_MS must be positive")

    # Eager: malformed headers must never surface as a per-request error
    parse_extra_headers(settings.openai_extra_headers)

    return settings

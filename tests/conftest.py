"""Pytest configuration and shared fixtures."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

ROYAL_ENV_VARS = (
    "DISCORD_TOKEN",
    "DISCORD_CLIENT_ID",
    "DISCORD_GUILD_ID",
    "OPENAI_API_KEY",
    "NOVITA_API_KEY",
    "OPENAI_BASE_URL",
    "NOVITA_BASE_URL",
    "OPENAI_API_URL",
    "OPENAI_MODEL",
    "NOVITA_MODEL",
    "OPENAI_AUTH_HEADER",
    "OPENAI_AUTH_PREFIX",
    "OPENAI_EXTRA_HEADERS",
    "SYSTEM_PROMPT",
    "REQUEST_TIMEOUT_MS",
    "MAX_HISTORY_MESSAGES",
    "MAX_HISTORY_CHARS",
    "AUTO_BAN_CHANNEL_IDS",
    "AUTO_BAN_DELETE_MESSAGE_SECONDS",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment and .env file."""
    for name in ROYAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def required_env(clean_env):
    """Minimal valid environment."""
    clean_env.setenv("DISCORD_TOKEN", "discord-token")
    clean_env.setenv("DISCORD_CLIENT_ID", "123456789")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    return clean_env


def completion_body(content=None, **message_fields) -> dict:
    """Build a chat completions success payload."""
    message = dict(message_fields)
    if content is not None:
        message["content"] = content
    return {"choices": [{"index": 0, "message": message}]}


def mock_http_client(status_code: int = 200, body=None, post=None):
    """Patchable stand-in for ``httpx.AsyncClient`` returning one response.

    Returns (client_cls, client) so tests can inspect the POST call.
    """
    response = MagicMock()
    response.status_code = status_code
    response.text = body if isinstance(body, str) else json.dumps(body or {})

    client = AsyncMock()
    client.post = post or AsyncMock(return_value=response)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)

    client_cls = MagicMock(return_value=client)
    return client_cls, client


@pytest.fixture
def make_http_client():
    return mock_http_client


@pytest.fixture
def make_completion():
    return completion_body

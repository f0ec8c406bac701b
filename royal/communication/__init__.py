"""Communication sub-core — platform-neutral message handling.

- Inbound: event model, mention stripping, routing decisions
- Outbound: reasoning markup stripping, message splitting
- Errors: user-facing error text
"""

from .inbound import (
    EMPTY_MENTION_PROMPT,
    InboundMessage,
    plan_chat,
    should_auto_ban,
    strip_bot_mention,
)
from .outbound import DISCORD_MAX_LENGTH, NO_CONTENT, split_message, strip_think_blocks
from .errors import format_error

__all__ = [
    # Inbound
    "EMPTY_MENTION_PROMPT",
    "InboundMessage",
    "plan_chat",
    "should_auto_ban",
    "strip_bot_mention",
    # Outbound
    "DISCORD_MAX_LENGTH",
    "NO_CONTENT",
    "split_message",
    "strip_think_blocks",
    # Errors
    "format_error",
]

"""Inbound message routing — decides what the bot does with a message.

These are plain functions over :class:`InboundMessage`, so the routing
rules can be tested without a Discord connection. The channel adapter
builds the event, asks these functions, and performs the side effects.
"""

import re
from dataclasses import dataclass
from typing import Optional

EMPTY_MENTION_PROMPT = "Respond helpfully to the user."


@dataclass(frozen=True)
class InboundMessage:
    """Platform-neutral view of a message-create event."""

    author_id: str
    is_bot: bool
    guild_id: Optional[str]     # None for direct messages
    channel_id: str
    content: str
    mentions_bot: bool

    @property
    def is_direct(self) -> bool:
        return self.guild_id is None

    @property
    def log_hint(self) -> str:
        return f"{self.guild_id}/{self.channel_id}"


def strip_bot_mention(content: Optional[str], bot_user_id: str) -> str:
    """Remove ``<@id>`` / ``<@!id>`` mention markup for the bot and trim."""
    pattern = re.compile(rf"<@!?{re.escape(str(bot_user_id))}>")
    return pattern.sub("", content or "").strip()


def plan_chat(event: InboundMessage, bot_user_id: str) -> Optional[str]:
    """Return the prompt to send to the model, or None to ignore the message.

    Only non-bot messages in a guild that mention the bot are answered.
    A bare mention becomes a generic instruction.
    """
    if event.is_bot or event.is_direct or not event.mentions_bot:
        return None
    cleaned = strip_bot_mention(event.content, bot_user_id)
    return cleaned or EMPTY_MENTION_PROMPT


def should_auto_ban(event: InboundMessage, channel_ids: frozenset[str]) -> bool:
    """Whether the author posted in a restricted channel and must be banned."""
    if not channel_ids or event.is_bot or event.is_direct:
        return False
    return event.channel_id in channel_ids

"""Royal — Main entry point."""

import asyncio
import logging
import sys
from typing import Optional

from .channels.discord import DiscordChannel
from .config import ConfigError, RoyalSettings, load_settings
from .conversation import ConversationManager, ConversationStore
from .llm.openai import CompletionClient

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("royal")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Log to stderr, and also to ``log_file`` when given."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=_log_format,
        handlers=handlers,
        force=True,
    )
    # discord.py is chatty at INFO about gateway resumes
    logging.getLogger("discord").setLevel(logging.WARNING)


def build_channel(settings: RoyalSettings) -> DiscordChannel:
    """Wire the completion client, conversation store and Discord adapter."""
    client = CompletionClient.from_settings(settings)
    store = ConversationStore(
        max_messages=settings.max_history_messages,
        max_chars=settings.max_history_chars,
    )
    manager = ConversationManager(client, store, default_prompt=settings.system_prompt)
    logger.info(
        f"Completion endpoint: {client.url} (model={client.model}, timeout={client.timeout:g}s)"
    )
    return DiscordChannel(manager, settings)


async def run(settings: RoyalSettings):
    """Main run loop."""
    channel = build_channel(settings)
    try:
        logger.info("Royal is running. Press Ctrl+C to stop.")
        await channel.start()
    finally:
        await channel.stop()


def main(debug: bool = False):
    """Entry point."""
    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging()
        logger.critical(f"[config] {e}")
        sys.exit(1)

    configure_logging("DEBUG" if debug else settings.log_level, settings.log_file)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

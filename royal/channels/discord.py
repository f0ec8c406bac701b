"""Discord channel adapter."""

import asyncio
import logging
import time
from typing import Optional

import discord
from discord import app_commands

from ..communication import (
    InboundMessage,
    format_error,
    plan_chat,
    should_auto_ban,
    split_message,
)
from ..config import RoyalSettings
from ..conversation import ConversationManager

logger = logging.getLogger("royal.discord")

RECENT_MESSAGE_SCAN = 100


class _TypingIndicator:
    """Keeps the 'typing…' indicator alive until cancelled.

    Usage:
        async with _TypingIndicator(channel):
            await long_running_work()

    Discord shows the indicator for ~10s per trigger, so it is re-sent
    every 8s. Auto-stops after max_duration seconds.
    """

    def __init__(self, channel, interval: float = 8.0, max_duration: float = 300.0):
        self._channel = channel
        self._interval = interval
        self._max_duration = max_duration
        self._task: Optional[asyncio.Task] = None

    async def _loop(self):
        start = time.monotonic()
        try:
            while time.monotonic() - start <= self._max_duration:
                await self._channel.typing()
                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Typing indicator failed: {e}")  # best-effort

    async def __aenter__(self):
        self._task = asyncio.create_task(self._loop())
        return self

    async def __aexit__(self, *exc):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass


class DiscordChannel:
    """Discord bot adapter for Royal."""

    def __init__(self, manager: ConversationManager, settings: RoyalSettings):
        self.manager = manager
        self.token = settings.discord_token
        self.guild_id = settings.discord_guild_id
        self.auto_ban_channels = settings.auto_ban_channels
        self.ban_delete_seconds = settings.auto_ban_delete_message_seconds

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        self.client = discord.Client(
            intents=intents,
            application_id=int(settings.discord_client_id),
        )
        self.tree = app_commands.CommandTree(self.client)
        self._commands_synced = False

        self.client.event(self.on_ready)
        self.client.event(self.on_message)
        self._register_commands()

    async def start(self):
        """Connect to the gateway. Runs until the client is closed."""
        await self.client.start(self.token)

    async def stop(self):
        if not self.client.is_closed():
            await self.client.close()
            logger.info("Discord client closed.")

    # ── Slash commands ───────────────────────────────────────

    def _register_commands(self):
        @app_commands.command(
            name="reset",
            description="Reset all conversation memory for every user.",
        )
        @app_commands.default_permissions(manage_guild=True)
        @app_commands.guild_only()
        async def reset(interaction: discord.Interaction):
            await self._run_command(interaction, self._cmd_reset)

        @app_commands.command(
            name="systemprompt",
            description="Set a custom global system prompt for the bot.",
        )
        @app_commands.describe(
            prompt="The system prompt to use",
            reset_context="Also clear all conversations so the new prompt takes effect immediately",
        )
        @app_commands.default_permissions(manage_guild=True)
        @app_commands.guild_only()
        async def systemprompt(
            interaction: discord.Interaction,
            prompt: str,
            reset_context: Optional[bool] = None,
        ):
            await self._run_command(
                interaction, self._cmd_systemprompt, prompt, bool(reset_context)
            )

        self.tree.add_command(reset)
        self.tree.add_command(systemprompt)

    async def sync_commands(self):
        """Publish slash commands. Guild sync is instant; global can take a while."""
        if self.guild_id:
            guild = discord.Object(id=int(self.guild_id))
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
            logger.info(f"[slash] Registered guild commands for guild={self.guild_id}")
        else:
            await self.tree.sync()
            logger.info("[slash] Registered global commands (may take a bit to appear everywhere)")

    async def _run_command(self, interaction: discord.Interaction, handler, *args):
        try:
            await handler(interaction, *args)
        except Exception as e:
            logger.error(f"[interaction error] {e}", exc_info=True)
            if not interaction.response.is_done():
                await interaction.response.send_message(format_error(e), ephemeral=True)

    async def _cmd_reset(self, interaction: discord.Interaction):
        self.manager.reset()
        await interaction.response.send_message(
            "✅ Cleared all conversation memory.", ephemeral=True
        )

    async def _cmd_systemprompt(
        self, interaction: discord.Interaction, prompt: str, reset_context: bool = False
    ):
        self.manager.set_system_prompt(prompt, also_reset=reset_context)
        await interaction.response.send_message(
            "✅ Updated global system prompt.", ephemeral=True
        )

    # ── Gateway events ───────────────────────────────────────

    async def on_ready(self):
        user = self.client.user
        if not user:
            return
        logger.info(f"Logged in as {user} ({user.id})")
        if self._commands_synced:
            return
        try:
            await self.sync_commands()
            self._commands_synced = True
        except discord.HTTPException as e:
            logger.error(f"[slash] register failed: {e}")

    async def on_message(self, message: discord.Message):
        bot_user = self.client.user
        if not bot_user:
            return

        event = self._to_event(message, bot_user.id)
        if event.is_bot:
            return

        if should_auto_ban(event, self.auto_ban_channels):
            if await self._auto_ban(message):
                return

        prompt = plan_chat(event, str(bot_user.id))
        if prompt is None:
            return

        try:
            async with _TypingIndicator(message.channel):
                reply = await self.manager.handle_message(
                    event.author_id, prompt, log_hint=event.log_hint
                )
            await self.send_long_reply(message, reply)
        except Exception as e:
            logger.error(f"[message error] {e}", exc_info=True)
            try:
                await message.reply(format_error(e), mention_author=False)
            except discord.HTTPException as send_err:
                logger.warning(f"Could not deliver error reply: {send_err}")

    @staticmethod
    def _to_event(message: discord.Message, bot_user_id: int) -> InboundMessage:
        return InboundMessage(
            author_id=str(message.author.id),
            is_bot=bool(message.author.bot),
            guild_id=str(message.guild.id) if message.guild else None,
            channel_id=str(message.channel.id),
            content=message.content or "",
            mentions_bot=any(u.id == bot_user_id for u in message.mentions),
        )

    async def send_long_reply(self, message: discord.Message, text: str):
        """Reply with the first chunk, then post the rest as plain messages."""
        parts = split_message(text)
        await message.reply(content=parts[0], mention_author=False)
        for part in parts[1:]:
            await message.channel.send(content=part)

    # ── Moderation ───────────────────────────────────────────

    async def _auto_ban(self, message: discord.Message) -> bool:
        """Ban the author of a message posted in a restricted channel.

        Deleting the message and the author's recent history is best-effort;
        only the ban itself decides the return value.
        """
        guild = message.guild
        channel = message.channel
        author = message.author
        if guild is None or not isinstance(channel, (discord.TextChannel, discord.Thread)):
            return False

        member = guild.get_member(author.id)
        if member is None:
            try:
                member = await guild.fetch_member(author.id)
            except discord.HTTPException:
                return False

        where = f"#{channel.name}" if getattr(channel, "name", None) else str(channel.id)
        reason = f"Auto-ban: posted in restricted channel {where}"

        try:
            await message.delete()
        except discord.HTTPException as e:
            logger.debug(f"[auto-ban] delete failed: {e}")

        try:
            await channel.purge(
                limit=RECENT_MESSAGE_SCAN,
                check=lambda m: m.author.id == author.id,
                reason=reason,
            )
        except discord.HTTPException as e:
            logger.debug(f"[auto-ban] bulk delete failed: {e}")

        try:
            await guild.ban(
                member,
                reason=reason,
                delete_message_seconds=self.ban_delete_seconds,
            )
        except discord.HTTPException as e:
            logger.error(f"[auto-ban error] {e}", exc_info=True)
            return False

        logger.info(f"[auto-ban] Banned {member} ({member.id}) for posting in {channel.id}")
        return True

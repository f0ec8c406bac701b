"""Config command."""

import sys

from rich.table import Table

from . import cli
from .shared import console, mask_secret


@cli.command(name="config")
def config_cmd():
    """Validate configuration and show the resolved settings."""
    from royal.config import ConfigError, load_settings
    from royal.llm.openai import resolve_chat_url

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    table = Table(title="Royal Configuration", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Discord token", mask_secret(settings.discord_token))
    table.add_row("Application ID", settings.discord_client_id)
    table.add_row("Command scope", f"guild {settings.discord_guild_id}" if settings.discord_guild_id else "global")
    table.add_row("Endpoint", resolve_chat_url(settings.openai_base_url, settings.openai_api_url))
    table.add_row("Model", settings.openai_model)
    table.add_row("API key", mask_secret(settings.openai_api_key))
    prefix = settings.openai_auth_prefix
    table.add_row("Auth header", f"{settings.openai_auth_header}: {prefix + ' ' if prefix else ''}<key>")
    extra = settings.extra_headers
    table.add_row("Extra headers", ", ".join(sorted(extra)) if extra else "(none)")
    table.add_row("Timeout", f"{settings.request_timeout:g}s")
    table.add_row("History", f"{settings.max_history_messages} messages / {settings.max_history_chars} chars")
    channels = settings.auto_ban_channels
    table.add_row("Auto-ban channels", ", ".join(sorted(channels)) if channels else "(none)")
    table.add_row("Ban purge window", f"{settings.auto_ban_delete_message_seconds}s")

    console.print(table)
    console.print("[green]✓ Configuration OK[/green]")

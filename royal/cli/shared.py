"""Shared utilities for Royal CLI commands."""

from typing import Optional

from rich.console import Console

console = Console()


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Show only the last few characters of a credential."""
    if not value:
        return "(not set)"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * 8 + value[-visible:]

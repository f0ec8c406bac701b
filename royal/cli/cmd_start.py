"""Start command."""

import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the Discord bot."""
    from royal.main import main as run_bot

    console.print("[bold blue]Starting Royal...[/bold blue]")
    run_bot(debug=debug)

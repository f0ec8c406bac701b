"""Royal CLI — command line interface."""

import sys

import click

from royal import __version__


@click.group()
@click.version_option(version=__version__, prog_name="royal")
def cli():
    """Royal — Discord mention bot for OpenAI-compatible chat APIs"""


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_config  # noqa: E402, F401


def main():
    """CLI entry point."""
    try:
        cli(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.exceptions.Exit as e:
        sys.exit(e.code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)

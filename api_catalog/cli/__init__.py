"""Command line interface package."""

import click
from dotenv import load_dotenv

from ..config import config
from .commands.ingest import ingest
from .commands.query import query
from .commands.remove import remove
from .logging import setup_logging

# Load environment variables
load_dotenv()


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv, -vvv)")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """API Catalog CLI"""
    ctx.ensure_object(dict)
    setup_logging(verbose, config.log_level)


# Register commands
cli.add_command(query)
cli.add_command(ingest)
cli.add_command(remove)

__all__ = ["cli"]

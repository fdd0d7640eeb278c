"""Remove command."""

import logging
import sys
from typing import Optional

import click
from rich.console import Console

from ...config import config
from ...deploy import deployment_name
from ...exceptions import CatalogSearchError
from . import get_catalog

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("package_name")
@click.option("--stage", default=None, help="Deployment stage (defaults to STAGE).")
@click.pass_context
def remove(ctx: click.Context, package_name: str, stage: Optional[str]) -> None:
    """Delete a package deployment and its endpoints from the catalog."""
    try:
        name = deployment_name(package_name, stage or config.stage)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    try:
        catalog = get_catalog(ctx)
        catalog.connect()
        removed = catalog.delete_deployment(name)
    except CatalogSearchError as e:
        logger.error(f"Removal failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)

    console.print(f"Removed {name} ({removed} endpoints)")

"""Ingest command."""

import json
import logging
import sys
from typing import Optional, TextIO

import click
from rich.console import Console
from rich.table import Table

from ...config import config
from ...deploy import DeploymentContext, extract_base_url
from ...exceptions import CatalogSearchError
from ...ingestion import Ingestor
from ...models import IngestionResult
from ...openapi import load_document
from . import get_catalog, get_embedder

logger = logging.getLogger(__name__)
console = Console()


def print_summary(result: IngestionResult) -> None:
    console.print(
        f"Ingested [bold]{result.deployment_name}[/bold]: "
        f"{result.total} operations, [green]{result.succeeded} succeeded[/green] "
        f"({result.inserted} inserted, {result.updated} updated), "
        f"[red]{result.failed} failed[/red]"
    )

    if not result.failed:
        return

    table = Table(title="Failed operations", show_header=True, header_style="bold red")
    table.add_column("Method", style="green")
    table.add_column("Path", style="blue")
    table.add_column("Phase", style="yellow")
    table.add_column("Error")
    for error in result.errors:
        table.add_row(error["method"], error["path"], error["phase"], error["error"])
    console.print(table)


@click.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--package", "package_name", required=True, help="Deployed package name.")
@click.option("--base-url", default=None, help="Deployed base URL including the stage prefix.")
@click.option(
    "--serverless-output",
    type=click.File("r"),
    default=None,
    help="File with `serverless deploy` output to read the base URL from.",
)
@click.option("--stage", default=None, help="Deployment stage (defaults to STAGE).")
@click.option("--project", "project_id", default=None, help="Project owning the deployment.")
@click.option("--function-type", default="MIXED", show_default=True)
@click.option("--workers", type=int, default=None, help="Operations ingested in parallel.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_context
def ingest(
    ctx: click.Context,
    document: str,
    package_name: str,
    base_url: Optional[str],
    serverless_output: Optional[TextIO],
    stage: Optional[str],
    project_id: Optional[str],
    function_type: str,
    workers: Optional[int],
    as_json: bool,
) -> None:
    """Embed every operation of an OpenAPI DOCUMENT into the catalog."""
    output = serverless_output.read() if serverless_output else None
    if base_url is None and output is not None:
        base_url = extract_base_url(output)
    if not base_url:
        console.print("[red]Error:[/red] Base URL not given and not found in serverless output")
        sys.exit(1)

    try:
        deployment = DeploymentContext(
            package_name=package_name,
            base_url=base_url,
            stage=stage or config.stage,
            function_type=function_type,
            bot_project_id=project_id,
            serverless_output=output,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    try:
        spec = load_document(document)
        ingestor = Ingestor(
            get_catalog(ctx),
            get_embedder(ctx),
            max_workers=workers or config.ingest_workers,
        )
        result = ingestor.ingest(deployment, spec)
    except CatalogSearchError as e:
        logger.error(f"Ingestion failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        print_summary(result)

    if result.failed:
        sys.exit(1)

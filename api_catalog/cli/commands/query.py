"""
Query Command for API Catalog CLI

Lists or semantically searches catalog records within a scope.

Positional form:
    api-catalog query project <projectId> [stage] ["query"]
    api-catalog query public [stage] ["query"]
    api-catalog query all [stage] ["query"]

A token right after the scope that does not start with a quote is read as
the stage. `--stage` avoids the ambiguity: with it, every remaining token is
query text.

Example Usage:
    $ api-catalog query project my-chatbot
    $ api-catalog query project my-chatbot "*"
    $ api-catalog query project my-chatbot PROD "'send message'"
    $ api-catalog query all --stage PROD send message
    $ api-catalog query public
"""

import logging
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from ...config import config
from ...exceptions import CatalogSearchError, UsageError
from ...search import SCOPES, CatalogSearcher, QueryResult, Scope, resolve_positional
from . import get_catalog, get_embedder

logger = logging.getLogger(__name__)
console = Console()

USAGE = """Usage:
 1) Project APIs:         api-catalog query project <projectId> [stage] ["query"]
 2) Public APIs:          api-catalog query public [stage] ["query"]
 3) All APIs:             api-catalog query all [stage] ["query"]

Examples:
 - List project APIs:     api-catalog query project my-chatbot
 - All stages explicitly: api-catalog query project my-chatbot "*"
 - Search project APIs:   api-catalog query project my-chatbot --stage "*" send message
 - With specific stage:   api-catalog query project my-chatbot PROD "'send message'"
 - List public APIs:      api-catalog query public
 - Search all APIs:       api-catalog query all --stage "*" user authentication"""


def resolve_with_stage_flag(
    action: str, args: Tuple[str, ...], stage: str
) -> Tuple[Scope, Optional[str]]:
    """Resolve arguments when the stage was given with `--stage`."""
    action = action.lower()
    if action not in SCOPES:
        raise UsageError(f"Unknown action: {action}")

    args = list(args)
    project_id = args.pop(0) if action == "project" and args else None
    text = " ".join(args).strip().strip("'\"").strip()
    return Scope(action, project_id=project_id, stage=stage), text or None


def render(result: QueryResult) -> None:
    """Print a listing or search result as a table."""
    scope = result.scope.describe()
    searching = result.mode == "search"
    title = f'Top results for "{result.query}" in {scope}' if searching else f"APIs in {scope}"

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Project", style="cyan")
    table.add_column("Base URL")
    table.add_column("Path", style="blue")
    table.add_column("Method", style="green")
    table.add_column("Stage", style="yellow")
    table.add_column("Public")
    if searching:
        table.add_column("Similarity", justify="right", style="cyan")

    rows = [(hit.record, hit.similarity) for hit in result.hits] if searching else [
        (record, None) for record in result.records
    ]
    for record, similarity in rows:
        cells = [
            record.bot_project_id or "-",
            record.base_url,
            record.endpoint_path,
            record.http_method,
            record.stage,
            str(record.is_public),
        ]
        if searching:
            cells.append(f"{similarity:.3f}")
        table.add_row(*cells)

    if not rows:
        console.print(f"No APIs found in {scope}.")
    else:
        console.print(table)


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("action", required=False)
@click.argument("args", nargs=-1)
@click.option("--stage", default=None, help='Stage filter, "*" for all stages.')
@click.option("--limit", "-n", type=int, default=None, help="Maximum number of results.")
@click.pass_context
def query(
    ctx: click.Context,
    action: Optional[str],
    args: Tuple[str, ...],
    stage: Optional[str],
    limit: Optional[int],
) -> None:
    """List or search APIs in a project, public or all scope."""
    try:
        if not action:
            raise UsageError("Missing action")
        if stage is not None:
            scope, text = resolve_with_stage_flag(action, args, stage)
        else:
            scope, text = resolve_positional(action, args)
    except UsageError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print(USAGE, markup=False)
        sys.exit(1)

    if limit is None:
        limit = config.top_k if text else config.list_limit

    try:
        catalog = get_catalog(ctx)
        catalog.connect()
        embedder = get_embedder(ctx) if text else None
        result = CatalogSearcher(catalog, embedder).dispatch(scope, text, limit=limit)
    except CatalogSearchError as e:
        logger.error(f"Query failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)

    render(result)
    console.print("Done")

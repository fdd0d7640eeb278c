"""CLI commands package.

Commands take their catalog and embedder from `ctx.obj` when present, so
callers (and tests) can hand in their own; otherwise they are built from
configuration.
"""

import click

from ...catalog import Catalog, create_catalog
from ...config import config
from ...embeddings import Embedder, create_embedder


def get_catalog(ctx: click.Context) -> Catalog:
    obj = ctx.ensure_object(dict)
    if obj.get("catalog") is None:
        obj["catalog"] = create_catalog(config)
    return obj["catalog"]


def get_embedder(ctx: click.Context) -> Embedder:
    obj = ctx.ensure_object(dict)
    if obj.get("embedder") is None:
        obj["embedder"] = create_embedder(config)
    return obj["embedder"]

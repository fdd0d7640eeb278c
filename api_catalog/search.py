"""
Catalog Queries for API Catalog

Resolves a scope (`project <id>`, `public` or `all`) plus an optional stage
and query into either a listing of recent records or a semantic search.

Stages: `None` means no stage was given and `ALL_STAGES` ("*") means every
stage was asked for explicitly. Neither filters by stage; any other value
is matched uppercase.

Example Usage:
    from api_catalog.search import CatalogSearcher, Scope

    searcher = CatalogSearcher(catalog, embedder)
    result = searcher.dispatch(Scope("all"), "send message", limit=5)
    for hit in result.hits:
        print(hit.similarity, hit.record.endpoint_path)
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .catalog import Catalog
from .embeddings import Embedder
from .exceptions import UsageError
from .metrics import MetricsManager
from .models import ALL_STAGES, EndpointRecord, ListFilters, SearchHit

logger = logging.getLogger(__name__)

SCOPES = ("project", "public", "all")
QUOTES = ("'", '"')


@dataclass
class Scope:
    """Which records a listing or search may return."""

    kind: str
    project_id: Optional[str] = None
    stage: Optional[str] = None

    def __post_init__(self):
        self.kind = self.kind.lower()
        if self.kind not in SCOPES:
            raise UsageError(f"Unknown action: {self.kind}")
        if self.kind == "project" and not self.project_id:
            raise UsageError("Missing project ID")
        if self.stage is not None:
            self.stage = self.stage.strip() or None

    @property
    def stage_filter(self) -> Optional[str]:
        if self.stage is None or self.stage == ALL_STAGES:
            return None
        return self.stage.upper()

    def filters(self) -> ListFilters:
        return ListFilters(
            project_id=self.project_id if self.kind == "project" else None,
            is_public=True if self.kind == "public" else None,
            stage=self.stage_filter,
        )

    def describe(self) -> str:
        if self.kind == "project":
            label = f'project "{self.project_id}"'
        elif self.kind == "public":
            label = "public APIs"
        else:
            label = "all APIs"

        if self.stage == ALL_STAGES:
            return f"{label} (all stages)"
        if self.stage_filter:
            return f'{label} with stage "{self.stage_filter}"'
        return label


def _is_quoted(token: str) -> bool:
    return token.startswith(QUOTES)


def _unquote(token: Optional[str]) -> Optional[str]:
    if token is None:
        return None
    token = token.strip()
    if token[:1] in QUOTES:
        token = token[1:]
        if token[-1:] in QUOTES:
            token = token[:-1]
    return token.strip() or None


def resolve_positional(action: str, args: Sequence[str]) -> Tuple[Scope, Optional[str]]:
    """Resolve `<action> [projectId] [stage] [query]` positional arguments.

    After the project id (for `project`), a token that does not start with
    a quote character is the stage and the token after it the query;
    otherwise the token is the query.

    Raises:
        UsageError: For an unknown action or a missing project id
    """
    action = action.lower()
    if action not in SCOPES:
        raise UsageError(f"Unknown action: {action}")

    args = list(args)
    project_id = None
    if action == "project":
        if not args or not args[0]:
            raise UsageError("Missing project ID")
        project_id = args.pop(0)

    stage = None
    query = None
    if args and args[0] and not _is_quoted(args[0]):
        stage = args[0]
        query = args[1] if len(args) > 1 else None
    elif args:
        query = args[0]

    return Scope(action, project_id=project_id, stage=stage), _unquote(query)


@dataclass
class QueryResult:
    """Records for a listing, or ranked hits for a search."""

    scope: Scope
    query: Optional[str] = None
    records: List[EndpointRecord] = field(default_factory=list)
    hits: List[SearchHit] = field(default_factory=list)

    @property
    def mode(self) -> str:
        return "search" if self.query else "list"


class CatalogSearcher:
    """Lists and searches the catalog within a scope."""

    def __init__(self, catalog: Catalog, embedder: Optional[Embedder] = None):
        self.catalog = catalog
        self.embedder = embedder
        self.metrics = MetricsManager()

    def list(self, scope: Scope, limit: int = 10) -> List[EndpointRecord]:
        """Most recently updated records in scope, without embeddings."""
        records = self.catalog.list_endpoints(scope.filters(), limit)
        self.metrics.increment_counter(
            "searches_performed", labels={"mode": "list", "scope": scope.kind}
        )
        return records

    def search(self, scope: Scope, query: str, k: int = 10) -> List[SearchHit]:
        """Top `k` records in scope ranked by similarity to `query`."""
        if self.embedder is None:
            raise UsageError("Semantic search needs an embedder")

        logger.info(f'Embedding query: "{query}"')
        query_embedding = self.embedder.embed(query)
        logger.debug(f"Searching {scope.describe()}")

        if scope.kind == "project":
            hits = self.catalog.search_by_project(
                query_embedding, scope.project_id, k, stage_filter=scope.stage_filter
            )
        else:
            hits = self.catalog.search_global(
                query_embedding,
                k,
                stage_filter=scope.stage_filter,
                public_only=scope.kind == "public",
            )

        self.metrics.increment_counter(
            "searches_performed", labels={"mode": "search", "scope": scope.kind}
        )
        return sorted(hits, key=lambda hit: hit.similarity, reverse=True)

    def dispatch(
        self, scope: Scope, query: Optional[str] = None, limit: int = 10
    ) -> QueryResult:
        """List when there is no query, search otherwise."""
        if query:
            return QueryResult(scope=scope, query=query, hits=self.search(scope, query, limit))
        return QueryResult(scope=scope, records=self.list(scope, limit))

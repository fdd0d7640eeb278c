"""
Supabase Catalog for API Catalog

Endpoint records live in a Postgres table with a pgvector `embedding`
column. Similarity ranking runs in two stored procedures:

    match_apis_by_project(query_embedding, project_id, k, stage_filter)
    match_apis(query_embedding, k, stage_filter, public_only)

Both return the record columns plus a `similarity` column, most similar
first.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from pydantic import TypeAdapter
from supabase import Client, create_client

from ..exceptions import CatalogConnectionError, CatalogError
from ..models import LIST_COLUMNS, DeploymentRecord, EndpointRecord, ListFilters, SearchHit
from .base import Catalog, RecordId

logger = logging.getLogger(__name__)

STORE_ERRORS = (APIError, httpx.HTTPError)

# JSON-mode serializer for partial updates, matching `to_row`
ROW_ADAPTER = TypeAdapter(Dict[str, Any])


class SupabaseCatalog(Catalog):
    """Catalog backed by Supabase tables and RPC functions."""

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "api_embeddings",
        deployments_table: str = "client_functions",
        project_match_function: str = "match_apis_by_project",
        global_match_function: str = "match_apis",
        client: Optional[Client] = None,
    ):
        self.url = url
        self.key = key
        self.table = table
        self.deployments_table = deployments_table
        self.project_match_function = project_match_function
        self.global_match_function = global_match_function
        self.client = client

    def connect(self) -> None:
        if self.client is not None:
            return
        if not self.url or not self.key:
            raise CatalogConnectionError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
            )
        try:
            self.client = create_client(self.url, self.key)
        except Exception as e:
            raise CatalogConnectionError(f"Failed to connect to Supabase: {e}") from e
        logger.info(f"Connected to Supabase catalog table {self.table}")

    def _client(self) -> Client:
        if self.client is None:
            self.connect()
        return self.client

    def upsert_deployment(self, record: DeploymentRecord) -> None:
        try:
            self._client().table(self.deployments_table).upsert(
                record.to_row(), on_conflict="name"
            ).execute()
        except STORE_ERRORS as e:
            raise CatalogError(f"Failed to upsert deployment {record.name}: {e}") from e
        logger.info(f"Upserted deployment {record.name}")

    def delete_deployment(self, name: str) -> int:
        client = self._client()
        try:
            response = (
                client.table(self.deployments_table)
                .select("name,base_url")
                .eq("name", name)
                .limit(1)
                .execute()
            )
            if not response.data:
                logger.warning(f"Deployment {name} not found")
                return 0

            base_url = response.data[0]["base_url"]
            deleted = (
                client.table(self.table).delete().eq("base_url", base_url).execute()
            )
            client.table(self.deployments_table).delete().eq("name", name).execute()
        except STORE_ERRORS as e:
            raise CatalogError(f"Failed to delete deployment {name}: {e}") from e

        removed = len(deleted.data or [])
        logger.info(f"Deleted deployment {name} and {removed} endpoints")
        return removed

    def find_endpoint(
        self, base_url: str, endpoint_path: str, http_method: str
    ) -> Optional[EndpointRecord]:
        try:
            response = (
                self._client()
                .table(self.table)
                .select("*")
                .eq("base_url", base_url)
                .eq("endpoint_path", endpoint_path)
                .eq("http_method", http_method)
                .limit(1)
                .execute()
            )
        except STORE_ERRORS as e:
            raise CatalogError(
                f"Failed to look up {http_method} {base_url}{endpoint_path}: {e}"
            ) from e

        if not response.data:
            return None
        return EndpointRecord(**response.data[0])

    def insert_endpoint(self, record: EndpointRecord) -> EndpointRecord:
        if record.embedding is None:
            raise CatalogError("Refusing to store a record without an embedding")
        try:
            response = self._client().table(self.table).insert(record.to_row()).execute()
        except STORE_ERRORS as e:
            raise CatalogError(
                f"Failed to insert {record.http_method} {record.endpoint_path}: {e}"
            ) from e

        if response.data:
            return EndpointRecord(**response.data[0])
        return record

    def update_endpoint(self, record_id: RecordId, fields: Dict[str, Any]) -> None:
        row = ROW_ADAPTER.dump_python(fields, mode="json")
        try:
            self._client().table(self.table).update(row).eq("id", record_id).execute()
        except STORE_ERRORS as e:
            raise CatalogError(f"Failed to update record {record_id}: {e}") from e

    def list_endpoints(self, filters: ListFilters, limit: int) -> List[EndpointRecord]:
        query = self._client().table(self.table).select(",".join(LIST_COLUMNS))
        if filters.project_id is not None:
            query = query.eq("bot_project_id", filters.project_id)
        if filters.is_public is not None:
            query = query.eq("is_public", filters.is_public)
        if filters.stage is not None:
            query = query.eq("stage", filters.stage)

        try:
            response = query.order("updated_at", desc=True).limit(limit).execute()
        except STORE_ERRORS as e:
            raise CatalogError(f"Failed to list endpoints: {e}") from e

        return [EndpointRecord(**row) for row in response.data or []]

    def _rpc(self, function: str, params: Dict[str, Any]) -> List[SearchHit]:
        try:
            response = self._client().rpc(function, params).execute()
        except STORE_ERRORS as e:
            raise CatalogError(f"Ranking function {function} failed: {e}") from e
        return [SearchHit.from_row(row) for row in response.data or []]

    def search_by_project(
        self,
        query_embedding: Sequence[float],
        project_id: str,
        k: int,
        stage_filter: Optional[str] = None,
    ) -> List[SearchHit]:
        return self._rpc(
            self.project_match_function,
            {
                "query_embedding": list(query_embedding),
                "project_id": project_id,
                "k": k,
                "stage_filter": stage_filter,
            },
        )

    def search_global(
        self,
        query_embedding: Sequence[float],
        k: int,
        stage_filter: Optional[str] = None,
        public_only: bool = False,
    ) -> List[SearchHit]:
        return self._rpc(
            self.global_match_function,
            {
                "query_embedding": list(query_embedding),
                "k": k,
                "stage_filter": stage_filter,
                "public_only": public_only,
            },
        )

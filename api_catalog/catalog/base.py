"""Catalog store contract."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

from ..models import DeploymentRecord, EndpointRecord, ListFilters, SearchHit

RecordId = Union[int, str]


class Catalog(ABC):
    """Persisted table of embedded API endpoints.

    Records are unique on (base_url, endpoint_path, http_method). Ranking
    functions return hits most similar first.
    """

    def connect(self) -> None:
        """Open the store connection.

        Raises:
            CatalogConnectionError: If the store cannot be reached
        """

    @abstractmethod
    def upsert_deployment(self, record: DeploymentRecord) -> None:
        """Insert or overwrite the deployment keyed by `record.name`."""

    @abstractmethod
    def delete_deployment(self, name: str) -> int:
        """Delete a deployment and its endpoints.

        Returns:
            Number of endpoint records removed
        """

    @abstractmethod
    def find_endpoint(
        self, base_url: str, endpoint_path: str, http_method: str
    ) -> Optional[EndpointRecord]:
        """Exact lookup by the unique triple."""

    @abstractmethod
    def insert_endpoint(self, record: EndpointRecord) -> EndpointRecord:
        """Insert a new record and return it with its id."""

    @abstractmethod
    def update_endpoint(self, record_id: RecordId, fields: Dict[str, Any]) -> None:
        """Update fields of an existing record in place."""

    @abstractmethod
    def list_endpoints(self, filters: ListFilters, limit: int) -> List[EndpointRecord]:
        """Records matching `filters`, newest `updated_at` first, without embeddings."""

    @abstractmethod
    def search_by_project(
        self,
        query_embedding: Sequence[float],
        project_id: str,
        k: int,
        stage_filter: Optional[str] = None,
    ) -> List[SearchHit]:
        """Top `k` records of one project ranked by similarity."""

    @abstractmethod
    def search_global(
        self,
        query_embedding: Sequence[float],
        k: int,
        stage_filter: Optional[str] = None,
        public_only: bool = False,
    ) -> List[SearchHit]:
        """Top `k` records across projects ranked by similarity."""

"""
Local Catalog for API Catalog

In-process catalog using FAISS for similarity search. Vectors are L2
normalized and stored in an inner product index, so scores are cosine
similarities. Record metadata is kept alongside the index and, when a
directory is given, both are saved after every write.

Example Usage:
    from api_catalog.catalog import LocalCatalog

    catalog = LocalCatalog(".cache/catalog/development")
    hits = catalog.search_global(query_vector, k=5, public_only=True)
"""

import logging
import os
import pickle
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import faiss
import numpy as np

from ..exceptions import CatalogConnectionError, CatalogError
from ..models import LIST_COLUMNS, DeploymentRecord, EndpointRecord, ListFilters, SearchHit
from .base import Catalog, RecordId

logger = logging.getLogger(__name__)


class LocalCatalog(Catalog):
    """FAISS backed catalog, optionally persisted to a directory."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self.index = None
        self.dimension: Optional[int] = None
        self.records: Dict[int, EndpointRecord] = {}
        self.deployments: Dict[str, DeploymentRecord] = {}
        self.next_id = 1
        self.initialized = False
        self._lock = threading.RLock()

    def connect(self) -> None:
        if self.initialized:
            return
        if self.path is not None:
            try:
                self.path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CatalogConnectionError(
                    f"Cannot use catalog directory {self.path}: {e}"
                ) from e
            self._load()
        self.initialized = True

    def _index_path(self) -> Path:
        return self.path / "catalog.index"

    def _metadata_path(self) -> Path:
        return self.path / "catalog.pkl"

    def _load(self) -> None:
        """Load saved index and metadata."""
        try:
            if os.path.exists(self._index_path()):
                self.index = faiss.read_index(str(self._index_path()))
                self.dimension = self.index.d
                logger.info(f"Loaded index with {self.index.ntotal} vectors")

            if os.path.exists(self._metadata_path()):
                with open(self._metadata_path(), "rb") as f:
                    state = pickle.load(f)
                self.records = state["records"]
                self.deployments = state["deployments"]
                self.next_id = state["next_id"]
                logger.info(f"Loaded metadata for {len(self.records)} records")
        except (OSError, pickle.UnpicklingError, KeyError, RuntimeError) as e:
            raise CatalogConnectionError(f"Failed to load catalog from {self.path}: {e}") from e

    def _save(self) -> None:
        """Save index and metadata."""
        if self.path is None:
            return
        try:
            if self.index is not None:
                faiss.write_index(self.index, str(self._index_path()))
            with open(self._metadata_path(), "wb") as f:
                pickle.dump(
                    {
                        "records": self.records,
                        "deployments": self.deployments,
                        "next_id": self.next_id,
                    },
                    f,
                )
        except (OSError, RuntimeError) as e:
            raise CatalogError(f"Failed to save catalog to {self.path}: {e}") from e

    def _vector(self, embedding: Sequence[float]) -> np.ndarray:
        vector = np.asarray(embedding, dtype=np.float32).reshape(1, -1)
        if self.dimension is None:
            self.dimension = vector.shape[1]
            self.index = faiss.IndexIDMap(faiss.IndexFlatIP(self.dimension))
            logger.info(f"Created FAISS index with dimension {self.dimension}")
        elif vector.shape[1] != self.dimension:
            raise CatalogError(
                f"Vector dimension {vector.shape[1]} does not match "
                f"index dimension {self.dimension}"
            )
        faiss.normalize_L2(vector)
        return vector

    def upsert_deployment(self, record: DeploymentRecord) -> None:
        with self._lock:
            self.connect()
            self.deployments[record.name] = record
            self._save()

    def delete_deployment(self, name: str) -> int:
        with self._lock:
            self.connect()
            deployment = self.deployments.pop(name, None)
            if deployment is None:
                logger.warning(f"Deployment {name} not found")
                return 0

            ids = [
                record_id
                for record_id, record in self.records.items()
                if record.base_url == deployment.base_url
            ]
            if ids and self.index is not None:
                self.index.remove_ids(np.array(ids, dtype=np.int64))
            for record_id in ids:
                del self.records[record_id]
            self._save()

        logger.info(f"Deleted deployment {name} and {len(ids)} endpoints")
        return len(ids)

    def find_endpoint(
        self, base_url: str, endpoint_path: str, http_method: str
    ) -> Optional[EndpointRecord]:
        key = (base_url, endpoint_path, http_method.upper())
        with self._lock:
            self.connect()
            for record in self.records.values():
                if record.key == key:
                    return record.model_copy(deep=True)
        return None

    def insert_endpoint(self, record: EndpointRecord) -> EndpointRecord:
        if record.embedding is None:
            raise CatalogError("Refusing to store a record without an embedding")

        with self._lock:
            self.connect()
            if any(existing.key == record.key for existing in self.records.values()):
                raise CatalogError(f"Duplicate endpoint {record.key}")

            vector = self._vector(record.embedding)
            record_id = self.next_id
            self.next_id += 1
            self.index.add_with_ids(vector, np.array([record_id], dtype=np.int64))

            stored = record.model_copy(update={"id": record_id}, deep=True)
            self.records[record_id] = stored
            self._save()
            return stored.model_copy(deep=True)

    def update_endpoint(self, record_id: RecordId, fields: Dict[str, Any]) -> None:
        with self._lock:
            self.connect()
            record = self.records.get(int(record_id))
            if record is None:
                raise CatalogError(f"Record {record_id} not found")

            if fields.get("embedding") is not None:
                vector = self._vector(fields["embedding"])
                ids = np.array([record.id], dtype=np.int64)
                self.index.remove_ids(ids)
                self.index.add_with_ids(vector, ids)

            self.records[record.id] = record.model_copy(update=fields, deep=True)
            self._save()

    def list_endpoints(self, filters: ListFilters, limit: int) -> List[EndpointRecord]:
        with self._lock:
            self.connect()
            matches = [
                record
                for record in self.records.values()
                if _matches(record, filters.project_id, filters.is_public, filters.stage)
            ]
        # Newest first, records without a timestamp last
        matches.sort(
            key=lambda r: r.updated_at.timestamp() if r.updated_at else float("-inf"),
            reverse=True,
        )
        return [
            EndpointRecord(**record.model_dump(include=set(LIST_COLUMNS)))
            for record in matches[:limit]
        ]

    def _rank(
        self,
        query_embedding: Sequence[float],
        k: int,
        predicate: Callable[[EndpointRecord], bool],
    ) -> List[SearchHit]:
        with self._lock:
            self.connect()
            if self.index is None or self.index.ntotal == 0 or k <= 0:
                return []

            query = self._vector(query_embedding)
            distances, indices = self.index.search(query, self.index.ntotal)

            hits = []
            for score, record_id in zip(distances[0], indices[0]):
                record = self.records.get(int(record_id))
                if record is None or not predicate(record):
                    continue
                hits.append(
                    SearchHit(
                        record=record.model_copy(update={"embedding": None}, deep=True),
                        similarity=float(score),
                    )
                )
                if len(hits) >= k:
                    break
            return hits

    def search_by_project(
        self,
        query_embedding: Sequence[float],
        project_id: str,
        k: int,
        stage_filter: Optional[str] = None,
    ) -> List[SearchHit]:
        return self._rank(
            query_embedding, k, lambda r: _matches(r, project_id, None, stage_filter)
        )

    def search_global(
        self,
        query_embedding: Sequence[float],
        k: int,
        stage_filter: Optional[str] = None,
        public_only: bool = False,
    ) -> List[SearchHit]:
        is_public = True if public_only else None
        return self._rank(
            query_embedding, k, lambda r: _matches(r, None, is_public, stage_filter)
        )


def _matches(
    record: EndpointRecord,
    project_id: Optional[str],
    is_public: Optional[bool],
    stage: Optional[str],
) -> bool:
    if project_id is not None and record.bot_project_id != project_id:
        return False
    if is_public is not None and record.is_public != is_public:
        return False
    if stage is not None and record.stage != stage.upper():
        return False
    return True

"""
OpenAPI Ingestion for API Catalog

Turns a deployed OpenAPI document into catalog records: one deployment
record, then one embedded endpoint record per operation. Each operation is
embedded and upserted on its own; a failure is recorded against its
(path, method) and the run continues with the next operation.

Only an invalid document or an unreachable catalog aborts a run. The
deployment record is always written before any endpoint record.

Example Usage:
    from api_catalog.deploy import DeploymentContext
    from api_catalog.ingestion import Ingestor

    ingestor = Ingestor(catalog, embedder)
    result = ingestor.ingest(
        DeploymentContext("aws-ses", "https://api.example.com/staging", "STAGING"),
        document,
    )
    print(result.succeeded, result.failed, result.errors)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .catalog import Catalog
from .deploy import DeploymentContext
from .doc_text import build_doc_text
from .embeddings import Embedder
from .exceptions import EmbeddingError
from .metrics import MetricsManager
from .models import EndpointRecord, IngestionResult, OperationOutcome
from .openapi import iter_operations, string_keys, validate_document

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Ingestor:
    """Embeds and upserts every operation of an OpenAPI document."""

    def __init__(
        self,
        catalog: Catalog,
        embedder: Embedder,
        clock: Optional[Callable[[], datetime]] = None,
        max_workers: int = 1,
    ):
        """Initialize ingestor.

        Args:
            catalog: Store receiving the records
            embedder: Embedding provider for doc text
            clock: Source of `updated_at` timestamps
            max_workers: Operations processed concurrently after the
                deployment record is written
        """
        self.catalog = catalog
        self.embedder = embedder
        self.clock = clock or utc_now
        self.max_workers = max(1, max_workers)
        self.metrics = MetricsManager()

    def ingest(
        self, deployment: DeploymentContext, document: Dict[str, Any]
    ) -> IngestionResult:
        """Ingest a deployed OpenAPI document.

        Args:
            deployment: Package, base URL and stage of the deployment
            document: Parsed OpenAPI document

        Returns:
            Per-operation outcomes for the run

        Raises:
            DocumentError: If the document is malformed
            CatalogError: If the catalog is unreachable or rejects the
                deployment record
        """
        validate_document(document)
        document = string_keys(document)
        self.catalog.connect()

        record = deployment.to_record(document)
        record.updated_at = self.clock()
        self.catalog.upsert_deployment(record)

        operations = list(iter_operations(document))
        logger.info(
            f"Ingesting {len(operations)} operations for {deployment.name} "
            f"at {deployment.base_url}"
        )

        def run(operation):
            path, method, spec = operation
            return self._ingest_operation(deployment, document, path, method, spec)

        if self.max_workers > 1 and len(operations) > 1:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="ingest"
            ) as pool:
                outcomes = list(pool.map(run, operations))
        else:
            outcomes = [run(operation) for operation in operations]

        result = IngestionResult(deployment_name=deployment.name, outcomes=outcomes)
        logger.info(
            f"Ingested {deployment.name}: {result.succeeded}/{result.total} succeeded "
            f"({result.inserted} inserted, {result.updated} updated, {result.failed} failed)"
        )
        return result

    def _ingest_operation(
        self,
        deployment: DeploymentContext,
        document: Dict[str, Any],
        path: str,
        method: str,
        operation: Dict[str, Any],
    ) -> OperationOutcome:
        method = method.upper()

        try:
            doc_text = build_doc_text(path, method, operation, deployment.package_name)
        except Exception as e:
            logger.error(f"Failed to build doc text for {method} {path}: {e}")
            self.metrics.increment_counter("ingestion_errors", labels={"phase": "doc_text"})
            return OperationOutcome.failure(path, method, "doc_text", e)

        try:
            embedding = self.embedder.embed(doc_text)
            if embedding is None or len(embedding) == 0:
                raise EmbeddingError("Embedding provider returned an empty vector")
        except Exception as e:
            logger.error(f"Failed to embed {method} {path}: {e}")
            self.metrics.increment_counter("ingestion_errors", labels={"phase": "embed"})
            return OperationOutcome.failure(path, method, "embed", e)

        metadata = {
            "operation": operation,
            "openapi": document,
            "function_type": deployment.function_type,
        }
        now = self.clock()

        try:
            existing = self.catalog.find_endpoint(deployment.base_url, path, method)
            if existing is not None:
                self.catalog.update_endpoint(
                    existing.id,
                    {
                        "doc_text": doc_text,
                        "embedding": list(embedding),
                        "metadata": metadata,
                        "updated_at": now,
                    },
                )
                action = "updated"
            else:
                self.catalog.insert_endpoint(
                    EndpointRecord(
                        base_url=deployment.base_url,
                        endpoint_path=path,
                        http_method=method,
                        bot_project_id=deployment.bot_project_id,
                        is_public=deployment.is_public,
                        stage=deployment.stage,
                        doc_text=doc_text,
                        embedding=list(embedding),
                        metadata=metadata,
                        updated_at=now,
                    )
                )
                action = "inserted"
        except Exception as e:
            logger.error(f"Failed to store {method} {path}: {e}")
            self.metrics.increment_counter("ingestion_errors", labels={"phase": "store"})
            return OperationOutcome.failure(path, method, "store", e)

        logger.debug(f"{action.capitalize()} {method} {path}")
        self.metrics.increment_counter("operations_ingested", labels={"action": action})
        return OperationOutcome.success(path, method, action)

"""Shared fixtures for API Catalog tests."""

import hashlib
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest

from api_catalog.catalog import Catalog, LocalCatalog
from api_catalog.embeddings import Embedder
from api_catalog.exceptions import EmbeddingError
from api_catalog.models import DeploymentRecord, EndpointRecord, ListFilters, SearchHit

DIMENSION = 32


class FakeEmbedder(Embedder):
    """Deterministic bag-of-words hashing embedder."""

    def __init__(self, fail_on: Sequence[str] = ()):
        self.fail_on = list(fail_on)
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        for marker in self.fail_on:
            if marker in text:
                raise EmbeddingError(f"model unavailable for {marker}")

        vector = [0.0] * DIMENSION
        vector[0] = 0.1
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % (DIMENSION - 1)
            vector[bucket + 1] += 1.0
        return vector


class StepClock:
    """Clock advancing one second per call."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class RecordingCatalog(Catalog):
    """Catalog double that records calls and returns canned hits."""

    def __init__(self, hits: Optional[List[SearchHit]] = None):
        self.hits = hits or []
        self.calls: List[tuple] = []

    def upsert_deployment(self, record: DeploymentRecord) -> None:
        self.calls.append(("upsert_deployment", record.name))

    def delete_deployment(self, name: str) -> int:
        self.calls.append(("delete_deployment", name))
        return 0

    def find_endpoint(self, base_url, endpoint_path, http_method):
        self.calls.append(("find_endpoint", endpoint_path, http_method))
        return None

    def insert_endpoint(self, record: EndpointRecord) -> EndpointRecord:
        self.calls.append(("insert_endpoint", record.endpoint_path, record.http_method))
        return record

    def update_endpoint(self, record_id, fields: Dict[str, Any]) -> None:
        self.calls.append(("update_endpoint", record_id))

    def list_endpoints(self, filters: ListFilters, limit: int) -> List[EndpointRecord]:
        self.calls.append(("list_endpoints", filters, limit))
        return []

    def search_by_project(self, query_embedding, project_id, k, stage_filter=None):
        self.calls.append(
            ("search_by_project", list(query_embedding), project_id, k, stage_filter)
        )
        return list(self.hits)

    def search_global(self, query_embedding, k, stage_filter=None, public_only=False):
        self.calls.append(
            ("search_global", list(query_embedding), k, stage_filter, public_only)
        )
        return list(self.hits)


def make_record(
    path: str,
    method: str = "POST",
    stage: str = "STAGING",
    project: Optional[str] = None,
    base_url: str = "https://api.example.com/staging",
    text: Optional[str] = None,
    updated_at: Optional[datetime] = None,
) -> EndpointRecord:
    doc_text = text or f"{method} {path}"
    return EndpointRecord(
        base_url=base_url,
        endpoint_path=path,
        http_method=method,
        bot_project_id=project,
        is_public=project is None,
        stage=stage,
        doc_text=doc_text,
        embedding=FakeEmbedder().embed(doc_text),
        updated_at=updated_at,
    )


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def catalog() -> LocalCatalog:
    return LocalCatalog()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def ses_document() -> Dict[str, Any]:
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "AWS SES",
            "version": "1.0.0",
            "description": "Send email through Amazon SES",
        },
        "paths": {
            "/send-single-email": {
                "post": {
                    "operationId": "sendSingleEmail",
                    "summary": "Send a single email",
                    "requestBody": {
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "to": {"type": "string"},
                                        "subject": {"type": "string"},
                                    },
                                    "required": ["to"],
                                }
                            }
                        }
                    },
                    "responses": {
                        "200": {
                            "description": "Sent",
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "object",
                                        "properties": {"messageId": {"type": "string"}},
                                    }
                                }
                            },
                        },
                        "400": {"description": "Bad request"},
                    },
                }
            },
            "/send-bulk-emails": {
                "parameters": [{"name": "trace", "in": "header"}],
                "post": {
                    "summary": "Send bulk emails",
                    "description": "Send the same email to many recipients",
                },
            },
            "/quota": {
                "get": {"summary": "Get sending quota"},
            },
        },
    }

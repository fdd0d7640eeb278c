"""Catalog records and ingestion result types."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .exceptions import CatalogError

# Sentinel stage argument meaning "every stage"
ALL_STAGES = "*"

# Columns projected by listings; never includes the embedding
LIST_COLUMNS = (
    "bot_project_id",
    "base_url",
    "endpoint_path",
    "http_method",
    "stage",
    "is_public",
    "updated_at",
)


class Stage(str, Enum):
    """Deployment stage."""

    PROD = "PROD"
    STAGING = "STAGING"
    DEV = "DEV"
    PREVIEW = "PREVIEW"

    @classmethod
    def from_mode(cls, mode: str) -> "Stage":
        """Map a deployment mode (any case) to a stage.

        Raises:
            ValueError: If the mode is not a known stage.
        """
        try:
            return cls(mode.strip().upper())
        except ValueError:
            raise ValueError(f"Invalid mode: {mode}") from None

    @property
    def slug(self) -> str:
        """Lowercase name used in serverless stage paths."""
        return self.value.lower()


class EndpointRecord(BaseModel):
    """One deployed HTTP operation and its embedding."""

    id: Optional[Union[int, str]] = None
    base_url: str
    endpoint_path: str
    http_method: str
    bot_project_id: Optional[str] = None
    user_id: Optional[str] = None
    client_function_id: Optional[str] = None
    is_public: bool = True
    stage: str
    doc_text: str = ""
    embedding: Optional[List[float]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @field_validator("http_method", "stage")
    @classmethod
    def _uppercase(cls, value: str) -> str:
        return value.upper()

    @field_validator("embedding", mode="before")
    @classmethod
    def _parse_vector(cls, value: Any) -> Any:
        # pgvector columns come back from PostgREST as "[0.1,0.2,...]"
        if isinstance(value, str):
            return json.loads(value)
        return value

    @property
    def key(self) -> tuple:
        """Unique (base_url, endpoint_path, http_method) triple."""
        return (self.base_url, self.endpoint_path, self.http_method)

    def to_row(self) -> Dict[str, Any]:
        """Serialize for a store write, dropping an unset id."""
        row = self.model_dump(mode="json")
        if row["id"] is None:
            del row["id"]
        return row


class DeploymentRecord(BaseModel):
    """Deployment-level metadata for one package at one stage."""

    name: str
    package_name: str
    base_url: str
    stage: str
    type: str = "MIXED"
    metadata: Dict[str, Any] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @field_validator("stage")
    @classmethod
    def _uppercase(cls, value: str) -> str:
        return value.upper()

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class SearchHit(BaseModel):
    """A ranked catalog record."""

    record: EndpointRecord
    similarity: float

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SearchHit":
        """Build a hit from a ranking function row.

        Raises:
            CatalogError: If the row has no similarity score
        """
        data = dict(row)
        similarity = data.pop("similarity", None)
        if similarity is None:
            raise CatalogError(f"Ranking row without similarity: {data.get('endpoint_path')}")
        return cls(record=EndpointRecord(**data), similarity=float(similarity))


@dataclass
class ListFilters:
    """Filters for catalog listings."""

    project_id: Optional[str] = None
    is_public: Optional[bool] = None
    stage: Optional[str] = None


@dataclass
class OperationOutcome:
    """Result of ingesting a single OpenAPI operation."""

    path: str
    method: str
    ok: bool
    action: Optional[str] = None  # 'inserted' or 'updated'
    phase: Optional[str] = None  # 'doc_text', 'embed' or 'store' on failure
    error: Optional[str] = None

    @classmethod
    def success(cls, path: str, method: str, action: str) -> "OperationOutcome":
        return cls(path=path, method=method, ok=True, action=action)

    @classmethod
    def failure(
        cls, path: str, method: str, phase: str, error: Exception
    ) -> "OperationOutcome":
        return cls(path=path, method=method, ok=False, phase=phase, error=str(error))


@dataclass
class IngestionResult:
    """Aggregate outcome of one ingestion run."""

    deployment_name: str
    outcomes: List[OperationOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def inserted(self) -> int:
        return sum(1 for o in self.outcomes if o.action == "inserted")

    @property
    def updated(self) -> int:
        return sum(1 for o in self.outcomes if o.action == "updated")

    @property
    def errors(self) -> List[Dict[str, str]]:
        """Failure details, one entry per failed operation."""
        return [
            {"path": o.path, "method": o.method, "phase": o.phase, "error": o.error}
            for o in self.outcomes
            if not o.ok
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deployment_name": self.deployment_name,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "inserted": self.inserted,
            "updated": self.updated,
            "errors": self.errors,
        }

"""Helpers tying serverless deployments to catalog ingestion."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .models import DeploymentRecord, Stage

# Serverless prints every endpoint as "<METHOD> - <url>"; docs.json is always deployed
DOCS_URL_PATTERN = re.compile(r"GET - (https://\S+?)/docs\.json")


def extract_base_url(serverless_output: str) -> Optional[str]:
    """Base URL (host and stage prefix) of a deployment, from `serverless deploy` output."""
    match = DOCS_URL_PATTERN.search(serverless_output)
    if match:
        return match.group(1)
    return None


def deployment_name(package_name: str, stage: str) -> str:
    """Deterministic deployment key, e.g. `aws-ses-staging`."""
    return f"{package_name}-{Stage.from_mode(stage).slug}"


@dataclass
class DeploymentContext:
    """Where and how a package was deployed."""

    package_name: str
    base_url: str
    stage: str
    function_type: str = "MIXED"
    bot_project_id: Optional[str] = None
    serverless_output: Optional[str] = None

    def __post_init__(self):
        self.stage = Stage.from_mode(self.stage).value
        self.base_url = self.base_url.rstrip("/")

    @property
    def name(self) -> str:
        return deployment_name(self.package_name, self.stage)

    @property
    def is_public(self) -> bool:
        return self.bot_project_id is None

    def to_record(self, document: Dict[str, Any]) -> DeploymentRecord:
        """Deployment-level metadata record for an OpenAPI document."""
        info = document.get("info") or {}
        metadata: Dict[str, Any] = {
            "title": info.get("title"),
            "version": info.get("version"),
            "description": info.get("description"),
            "doc_data": document,
        }
        if self.serverless_output is not None:
            metadata["serverless"] = {
                "stage": self.stage,
                "output": self.serverless_output,
            }
        return DeploymentRecord(
            name=self.name,
            package_name=self.package_name,
            base_url=self.base_url,
            stage=self.stage,
            type=self.function_type,
            metadata=metadata,
        )

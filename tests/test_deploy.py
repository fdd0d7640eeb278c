"""Tests for deployment helpers."""

import pytest

from api_catalog.deploy import DeploymentContext, deployment_name, extract_base_url
from api_catalog.models import Stage

SERVERLESS_OUTPUT = """
Deploying aws-ses to stage staging (us-east-1)

endpoints:
  POST - https://abc123.execute-api.us-east-1.amazonaws.com/staging/send-single-email
  GET - https://abc123.execute-api.us-east-1.amazonaws.com/staging/docs.json
functions:
  sendSingleEmail: aws-ses-staging-sendSingleEmail
"""


def test_extract_base_url():
    assert (
        extract_base_url(SERVERLESS_OUTPUT)
        == "https://abc123.execute-api.us-east-1.amazonaws.com/staging"
    )
    assert extract_base_url("Service deployed, no endpoints") is None


@pytest.mark.parametrize(
    "mode, stage, slug",
    [
        ("PROD", Stage.PROD, "prod"),
        ("staging", Stage.STAGING, "staging"),
        ("Dev", Stage.DEV, "dev"),
        ("PREVIEW", Stage.PREVIEW, "preview"),
    ],
)
def test_stage_from_mode(mode, stage, slug):
    assert Stage.from_mode(mode) is stage
    assert Stage.from_mode(mode).slug == slug


def test_stage_from_unknown_mode():
    with pytest.raises(ValueError, match="Invalid mode"):
        Stage.from_mode("qa")


def test_deployment_name_is_deterministic():
    assert deployment_name("aws-ses", "STAGING") == "aws-ses-staging"
    assert deployment_name("aws-ses", "staging") == deployment_name("aws-ses", "STAGING")


def test_deployment_context_record(ses_document):
    context = DeploymentContext(
        package_name="aws-ses",
        base_url="https://api.example.com/staging/",
        stage="staging",
        serverless_output=SERVERLESS_OUTPUT,
    )

    record = context.to_record(ses_document)

    assert context.stage == "STAGING"
    assert context.is_public
    assert record.name == "aws-ses-staging"
    assert record.base_url == "https://api.example.com/staging"
    assert record.type == "MIXED"
    assert record.metadata["title"] == "AWS SES"
    assert record.metadata["version"] == "1.0.0"
    assert record.metadata["doc_data"] == ses_document
    assert record.metadata["serverless"] == {"stage": "STAGING", "output": SERVERLESS_OUTPUT}


def test_project_deployment_is_not_public():
    context = DeploymentContext("slack", "https://x.example.com/dev", "DEV", bot_project_id="bot-1")

    assert not context.is_public
    assert "serverless" not in context.to_record({"paths": {}}).metadata

"""Tests for OpenAPI document loading."""

import json

import pytest
import yaml

from api_catalog.exceptions import DocumentError
from api_catalog.openapi import iter_operations, json_schema, load_document


def test_load_json_and_yaml(tmp_path, ses_document):
    json_path = tmp_path / "openapi.json"
    json_path.write_text(json.dumps(ses_document))
    yaml_path = tmp_path / "openapi.yaml"
    yaml_path.write_text(yaml.safe_dump(ses_document))

    assert load_document(json_path) == ses_document
    assert load_document(yaml_path) == ses_document


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "openapi.txt"
    path.write_text("{}")

    with pytest.raises(DocumentError):
        load_document(path)


def test_unreadable_documents(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")

    with pytest.raises(DocumentError):
        load_document(broken)
    with pytest.raises(DocumentError):
        load_document(tmp_path / "missing.json")


def test_document_without_paths(tmp_path):
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps({"info": {"title": "x"}}))

    with pytest.raises(DocumentError):
        load_document(path)


def test_iter_operations_skips_path_level_keys(ses_document):
    operations = [(path, method) for path, method, _ in iter_operations(ses_document)]

    assert operations == [
        ("/send-single-email", "post"),
        ("/send-bulk-emails", "post"),
        ("/quota", "get"),
    ]


def test_json_schema():
    assert json_schema({"content": {"application/json": {"schema": {"type": "string"}}}}) == {
        "type": "string"
    }
    assert json_schema({"content": {"text/plain": {"schema": {"type": "string"}}}}) is None
    assert json_schema({"description": "No content"}) is None
    assert json_schema(None) is None


def test_yaml_keys_are_strings(tmp_path):
    path = tmp_path / "openapi.yaml"
    path.write_text("paths:\n  /quota:\n    get:\n      responses:\n        200:\n          description: OK\n")

    document = load_document(path)

    assert list(document["paths"]["/quota"]["get"]["responses"]) == ["200"]

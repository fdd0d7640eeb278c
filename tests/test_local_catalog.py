"""Tests for the FAISS backed local catalog."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from api_catalog.catalog import LocalCatalog
from api_catalog.exceptions import CatalogError
from api_catalog.models import DeploymentRecord, ListFilters

from .conftest import make_record


def test_insert_assigns_ids(catalog):
    first = catalog.insert_endpoint(make_record("/a"))
    second = catalog.insert_endpoint(make_record("/b"))

    assert (first.id, second.id) == (1, 2)
    assert catalog.index.ntotal == 2


def test_duplicate_key_is_rejected(catalog):
    catalog.insert_endpoint(make_record("/a", method="post"))

    with pytest.raises(CatalogError):
        catalog.insert_endpoint(make_record("/a", method="POST"))


def test_missing_embedding_is_rejected(catalog):
    record = make_record("/a").model_copy(update={"embedding": None})

    with pytest.raises(CatalogError):
        catalog.insert_endpoint(record)


def test_dimension_mismatch_is_rejected(catalog):
    catalog.insert_endpoint(make_record("/a"))
    record = make_record("/b").model_copy(update={"embedding": [1.0, 0.0, 0.0]})

    with pytest.raises(CatalogError):
        catalog.insert_endpoint(record)


def test_update_replaces_vector(catalog):
    stored = catalog.insert_endpoint(make_record("/a", text="list boards"))
    replacement = make_record("/a", text="send an email")

    catalog.update_endpoint(
        stored.id, {"doc_text": replacement.doc_text, "embedding": replacement.embedding}
    )

    hits = catalog.search_global(replacement.embedding, k=1)
    assert catalog.index.ntotal == 1
    assert hits[0].record.id == stored.id
    assert hits[0].record.doc_text == "send an email"
    assert hits[0].similarity == pytest.approx(1.0, abs=1e-5)


def test_update_unknown_record(catalog):
    with pytest.raises(CatalogError):
        catalog.update_endpoint(99, {"doc_text": "x"})


def test_find_endpoint_returns_copy(catalog):
    catalog.insert_endpoint(make_record("/a"))

    found = catalog.find_endpoint("https://api.example.com/staging", "/a", "post")
    found.doc_text = "changed"

    again = catalog.find_endpoint("https://api.example.com/staging", "/a", "POST")
    assert again.doc_text == "POST /a"


def test_search_on_empty_catalog(catalog):
    assert catalog.search_global([0.1] * 32, k=5) == []
    assert catalog.list_endpoints(ListFilters(), limit=5) == []


def test_delete_deployment_removes_endpoints(catalog):
    staging = "https://api.example.com/staging"
    prod = "https://api.example.com/prod"
    catalog.upsert_deployment(
        DeploymentRecord(name="aws-ses-staging", package_name="aws-ses", base_url=staging, stage="STAGING")
    )
    catalog.insert_endpoint(make_record("/a", base_url=staging))
    catalog.insert_endpoint(make_record("/b", base_url=staging))
    catalog.insert_endpoint(make_record("/a", base_url=prod, stage="PROD"))

    removed = catalog.delete_deployment("aws-ses-staging")

    assert removed == 2
    assert "aws-ses-staging" not in catalog.deployments
    assert [r.base_url for r in catalog.records.values()] == [prod]
    assert catalog.index.ntotal == 1
    assert catalog.delete_deployment("aws-ses-staging") == 0


def test_persistence_round_trip(tmp_path):
    catalog = LocalCatalog(tmp_path)
    catalog.connect()
    catalog.upsert_deployment(
        DeploymentRecord(
            name="aws-ses-staging",
            package_name="aws-ses",
            base_url="https://api.example.com/staging",
            stage="STAGING",
        )
    )
    stored = catalog.insert_endpoint(make_record("/a", text="send an email"))

    reopened = LocalCatalog(tmp_path)
    reopened.connect()

    assert list(reopened.deployments) == ["aws-ses-staging"]
    assert reopened.find_endpoint(stored.base_url, "/a", "POST").id == stored.id
    hits = reopened.search_global(stored.embedding, k=1)
    assert hits[0].record.endpoint_path == "/a"

    next_record = reopened.insert_endpoint(make_record("/b"))
    assert next_record.id == stored.id + 1


def test_search_while_inserting(catalog):
    catalog.insert_endpoint(make_record("/seed", text="send message"))
    query = make_record("/query", text="send message").embedding

    def insert(n):
        catalog.insert_endpoint(make_record(f"/path-{n}", text=f"send message {n}"))

    def search(_):
        return catalog.search_global(query, k=5)

    with ThreadPoolExecutor(max_workers=8) as pool:
        inserts = [pool.submit(insert, n) for n in range(50)]
        searches = [pool.submit(search, n) for n in range(50)]
        for future in inserts + searches:
            future.result()

    assert len(catalog.records) == 51
    assert catalog.index.ntotal == 51

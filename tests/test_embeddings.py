"""Tests for embedding providers."""

import json
from types import SimpleNamespace

import httpx
import pytest

from api_catalog.embeddings import (
    GeminiEmbedder,
    SentenceTransformerEmbedder,
    create_embedder,
)
from api_catalog.exceptions import ConfigurationError, EmbeddingError


def gemini(handler) -> GeminiEmbedder:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return GeminiEmbedder(api_key="test-key", http_client=client)


def test_gemini_embed_request():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"embedding": {"values": [0.1, 0.2, 0.3]}})

    vector = gemini(handler).embed("send a single email")

    assert vector == [0.1, 0.2, 0.3]
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v1beta/models/text-embedding-004:embedContent"
    assert request.url.params["key"] == "test-key"
    assert json.loads(request.content) == {
        "model": "models/text-embedding-004",
        "content": {"parts": [{"text": "send a single email"}]},
    }


def test_gemini_http_error():
    embedder = gemini(lambda request: httpx.Response(429, json={"error": "quota"}))

    with pytest.raises(EmbeddingError):
        embedder.embed("text")


def test_gemini_malformed_response():
    embedder = gemini(lambda request: httpx.Response(200, json={"unexpected": {}}))

    with pytest.raises(EmbeddingError):
        embedder.embed("text")


def test_gemini_empty_values():
    embedder = gemini(lambda request: httpx.Response(200, json={"embedding": {"values": []}}))

    with pytest.raises(EmbeddingError):
        embedder.embed("text")


def test_gemini_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(EmbeddingError):
        gemini(handler).embed("text")


def test_gemini_requires_key():
    with pytest.raises(ConfigurationError):
        GeminiEmbedder(api_key=None)


def test_create_embedder_selection():
    gemini_config = SimpleNamespace(
        embedding_provider="gemini",
        gemini_api_key="key",
        gemini_model="text-embedding-004",
        embedding_timeout=5.0,
    )
    local_config = SimpleNamespace(
        embedding_provider="sentence-transformers",
        model_name="sentence-transformers/all-MiniLM-L6-v2",
    )

    assert isinstance(create_embedder(gemini_config), GeminiEmbedder)
    embedder = create_embedder(local_config)
    assert isinstance(embedder, SentenceTransformerEmbedder)
    assert embedder.model is None

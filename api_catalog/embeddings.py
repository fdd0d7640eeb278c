"""
Embedding Providers for API Catalog

Every provider implements `Embedder.embed(text) -> List[float]` and raises
`EmbeddingError` on failure, so ingestion and search never see a provider's
own exception types.

Providers:
- SentenceTransformerEmbedder: local sentence-transformers model, loaded lazily
- GeminiEmbedder: Google Generative Language `embedContent` over HTTP

Example Usage:
    from api_catalog.config import config
    from api_catalog.embeddings import create_embedder

    embedder = create_embedder(config)
    vector = embedder.embed("send a single email")
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
import numpy as np

from .exceptions import ConfigurationError, EmbeddingError
from .metrics import MetricsManager

logger = logging.getLogger(__name__)


class Embedder(ABC):
    """Text to vector capability."""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """Embed a single text.

        Raises:
            EmbeddingError: If no vector could be produced
        """


class SentenceTransformerEmbedder(Embedder):
    """Embedder backed by a local sentence-transformers model."""

    def __init__(self, model_name: str, normalize: bool = True):
        self.model_name = model_name
        self.normalize = normalize
        self.metrics = MetricsManager()
        self.model = None
        self.dimension: Optional[int] = None

    def initialize(self) -> None:
        """Load the model on first use."""
        if self.model is not None:
            return

        from sentence_transformers import SentenceTransformer

        try:
            logger.info(f"Loading model: {self.model_name}")
            self.model = SentenceTransformer(self.model_name)
            self.dimension = self.model.get_sentence_embedding_dimension()
            logger.info(f"Model loaded with embedding dimension: {self.dimension}")
        except Exception as e:
            raise EmbeddingError(f"Failed to load model {self.model_name}: {e}") from e

    def embed(self, text: str) -> List[float]:
        self.initialize()
        start = time.perf_counter()

        try:
            embeddings = self.model.encode(
                [text],
                convert_to_numpy=True,
                normalize_embeddings=self.normalize,
            )
        except Exception as e:
            self.metrics.increment_counter("embedding_errors")
            raise EmbeddingError(f"Failed to generate embedding: {e}") from e

        # Handle 3D output (batch_size x 1 x dimension)
        if embeddings.ndim == 3:
            embeddings = embeddings.squeeze(1)

        self.metrics.increment_counter("embeddings_generated")
        self.metrics.observe_value("embedding_latency", time.perf_counter() - start)
        return np.asarray(embeddings[0], dtype=np.float32).tolist()


class GeminiEmbedder(Embedder):
    """Embedder calling the Gemini `embedContent` endpoint."""

    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-004",
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is required for Gemini embeddings")

        self.api_key = api_key
        self.model = model
        self.metrics = MetricsManager()
        self.http_client = http_client or httpx.Client(timeout=timeout)

    def embed(self, text: str) -> List[float]:
        start = time.perf_counter()
        url = f"{self.base_url}/models/{self.model}:embedContent"
        body = {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]},
        }

        try:
            response = self.http_client.post(
                url, params={"key": self.api_key}, json=body
            )
            if response.status_code != 200:
                logger.error(f"Gemini API error response: {response.text}")
            response.raise_for_status()
            values = response.json()["embedding"]["values"]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            self.metrics.increment_counter("embedding_errors")
            raise EmbeddingError(f"Gemini embedding failed: {e}") from e

        if not values:
            self.metrics.increment_counter("embedding_errors")
            raise EmbeddingError("Gemini returned an empty embedding")

        self.metrics.increment_counter("embeddings_generated")
        self.metrics.observe_value("embedding_latency", time.perf_counter() - start)
        return [float(v) for v in values]

    def close(self) -> None:
        self.http_client.close()


def create_embedder(config) -> Embedder:
    """Build the embedder selected by `config.embedding_provider`."""
    if config.embedding_provider == "gemini":
        return GeminiEmbedder(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            timeout=config.embedding_timeout,
        )
    return SentenceTransformerEmbedder(config.model_name)

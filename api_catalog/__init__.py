"""
API Catalog - Embedding-indexed catalog of deployed API endpoints

This package turns deployed OpenAPI documents into embedded catalog records
and answers listing and semantic search queries over them, scoped by
project, visibility and deployment stage.

Key Features:
- Deterministic documentation text per OpenAPI operation
- Idempotent upserts keyed by (base_url, endpoint_path, http_method)
- Per-operation failure isolation during ingestion
- Project, public and global similarity search with stage filters
- Supabase (pgvector) and local FAISS catalog stores
- sentence-transformers and Gemini embedding providers
"""

import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("api-catalog")
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)

__all__ = ["__version__"]

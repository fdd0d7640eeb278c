"""
Configuration Management for API Catalog

Settings are read once from environment variables (optionally via a `.env`
file) into a singleton `Config`. Values that fail validation fall back to
their defaults.

Example Usage:
    from api_catalog.config import config

    table = config.catalog_table
    top_k = config.top_k

Environment Variables:
    ENVIRONMENT: Environment name (development/staging/production)
    STAGE: Deployment stage for ingestion (PROD/STAGING/DEV/PREVIEW)
    SUPABASE_URL: Supabase project URL
    SUPABASE_SERVICE_ROLE_KEY: Supabase service role key
    CATALOG_TABLE: Endpoint table name
    DEPLOYMENTS_TABLE: Deployment metadata table name
    PROJECT_MATCH_FUNCTION: Stored procedure for project-scoped ranking
    GLOBAL_MATCH_FUNCTION: Stored procedure for global ranking
    CATALOG_BACKEND: supabase or local
    CACHE_DIR: Directory for the local catalog
    EMBEDDING_PROVIDER: sentence-transformers or gemini
    MODEL_NAME: sentence-transformers model name
    GEMINI_API_KEY: Gemini API key
    GEMINI_MODEL: Gemini embedding model
    EMBEDDING_TIMEOUT: HTTP timeout in seconds for remote embedding
    TOP_K: Default number of search results
    LIST_LIMIT: Default number of listed records
    INGEST_WORKERS: Worker threads per ingestion run
    ENABLE_TELEMETRY: Enable Prometheus metrics exporter
    METRICS_PORT: Prometheus exporter port
    LOG_LEVEL: Logging level
"""

import logging
import os
from enum import Enum
from typing import Any, Dict

from .models import Stage

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Environment enumeration."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


CATALOG_BACKENDS = ("supabase", "local")
EMBEDDING_PROVIDERS = ("sentence-transformers", "gemini")


class Config:
    """Configuration settings."""

    _instance = None

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize configuration."""
        if self._initialized:
            return
        self._initialized = True
        self.reload()

    def reload(self) -> None:
        """Reset to defaults and re-read the environment."""
        # Environment
        self.environment = Environment.DEVELOPMENT.value
        self.stage = Stage.STAGING.value

        # Catalog
        self.catalog_backend = "supabase"
        self.supabase_url = ""
        self.supabase_key = ""
        self.catalog_table = "api_embeddings"
        self.deployments_table = "client_functions"
        self.project_match_function = "match_apis_by_project"
        self.global_match_function = "match_apis"
        self.cache_dir = ".cache/catalog"

        # Embeddings
        self.embedding_provider = "sentence-transformers"
        self.model_name = "sentence-transformers/all-MiniLM-L6-v2"
        self.gemini_api_key = ""
        self.gemini_model = "text-embedding-004"
        self.embedding_timeout = 30.0

        # Search
        self.top_k = 10
        self.list_limit = 10

        # Ingestion
        self.ingest_workers = 1

        # Monitoring
        self.enable_telemetry = False
        self.metrics_port = 5555

        # Logging
        self.log_level = "WARNING"

        self._load_from_env()

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        if os.path.exists(".env"):
            from dotenv import load_dotenv

            load_dotenv()

        self.environment = os.getenv("ENVIRONMENT", self.environment)
        self.stage = os.getenv("STAGE", self.stage).upper()

        self.catalog_backend = os.getenv("CATALOG_BACKEND", self.catalog_backend).lower()
        self.supabase_url = os.getenv("SUPABASE_URL", self.supabase_url)
        self.supabase_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", self.supabase_key)
        self.catalog_table = os.getenv("CATALOG_TABLE", self.catalog_table)
        self.deployments_table = os.getenv("DEPLOYMENTS_TABLE", self.deployments_table)
        self.project_match_function = os.getenv(
            "PROJECT_MATCH_FUNCTION", self.project_match_function
        )
        self.global_match_function = os.getenv(
            "GLOBAL_MATCH_FUNCTION", self.global_match_function
        )
        self.cache_dir = os.getenv("CACHE_DIR", self.cache_dir)

        self.embedding_provider = os.getenv(
            "EMBEDDING_PROVIDER", self.embedding_provider
        ).lower()
        self.model_name = os.getenv("MODEL_NAME", self.model_name)
        self.gemini_api_key = os.getenv("GEMINI_API_KEY", self.gemini_api_key)
        self.gemini_model = os.getenv("GEMINI_MODEL", self.gemini_model)
        self.embedding_timeout = self._float("EMBEDDING_TIMEOUT", self.embedding_timeout)

        self.top_k = self._int("TOP_K", self.top_k)
        self.list_limit = self._int("LIST_LIMIT", self.list_limit)
        self.ingest_workers = max(1, self._int("INGEST_WORKERS", self.ingest_workers))

        self.enable_telemetry = (
            os.getenv("ENABLE_TELEMETRY", str(self.enable_telemetry)).lower() == "true"
        )
        self.metrics_port = self._int("METRICS_PORT", self.metrics_port)

        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()

        # Validate environment
        if self.environment not in [e.value for e in Environment]:
            self.environment = Environment.DEVELOPMENT.value

        # Validate stage
        if self.stage not in [s.value for s in Stage]:
            logger.warning(f"Unknown stage {self.stage}, using {Stage.STAGING.value}")
            self.stage = Stage.STAGING.value

        if self.catalog_backend not in CATALOG_BACKENDS:
            self.catalog_backend = "supabase"

        if self.embedding_provider not in EMBEDDING_PROVIDERS:
            self.embedding_provider = "sentence-transformers"

        # Validate log level
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            self.log_level = "WARNING"

    @staticmethod
    def _int(name: str, default: int) -> int:
        try:
            return int(os.getenv(name, str(default)))
        except ValueError:
            logger.warning(f"Invalid integer for {name}, using {default}")
            return default

    @staticmethod
    def _float(name: str, default: float) -> float:
        try:
            return float(os.getenv(name, str(default)))
        except ValueError:
            logger.warning(f"Invalid number for {name}, using {default}")
            return default

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary, without secrets."""
        return {
            "environment": self.environment,
            "stage": self.stage,
            "catalog_backend": self.catalog_backend,
            "supabase_url": self.supabase_url,
            "catalog_table": self.catalog_table,
            "deployments_table": self.deployments_table,
            "project_match_function": self.project_match_function,
            "global_match_function": self.global_match_function,
            "cache_dir": self.cache_dir,
            "embedding_provider": self.embedding_provider,
            "model_name": self.model_name,
            "gemini_model": self.gemini_model,
            "embedding_timeout": self.embedding_timeout,
            "top_k": self.top_k,
            "list_limit": self.list_limit,
            "ingest_workers": self.ingest_workers,
            "enable_telemetry": self.enable_telemetry,
            "metrics_port": self.metrics_port,
            "log_level": self.log_level,
        }


# Create global instance
config = Config()

__all__ = ["config", "Config", "Environment"]

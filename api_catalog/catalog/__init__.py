"""
Catalog Stores for API Catalog

- Catalog: the store contract used by ingestion and search
- SupabaseCatalog: Postgres/pgvector tables with ranking stored procedures
- LocalCatalog: FAISS index persisted to the cache directory

Example Usage:
    from api_catalog.catalog import create_catalog
    from api_catalog.config import config

    catalog = create_catalog(config)
    catalog.connect()
"""

from pathlib import Path

from ..exceptions import ConfigurationError
from .base import Catalog
from .local_catalog import LocalCatalog
from .supabase_catalog import SupabaseCatalog


def create_catalog(config) -> Catalog:
    """Build the catalog selected by `config.catalog_backend`."""
    if config.catalog_backend == "local":
        return LocalCatalog(Path(config.cache_dir) / config.environment)
    if not config.supabase_url or not config.supabase_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return SupabaseCatalog(
        url=config.supabase_url,
        key=config.supabase_key,
        table=config.catalog_table,
        deployments_table=config.deployments_table,
        project_match_function=config.project_match_function,
        global_match_function=config.global_match_function,
    )


__all__ = ["Catalog", "LocalCatalog", "SupabaseCatalog", "create_catalog"]

"""Exception hierarchy for API Catalog."""


class CatalogSearchError(Exception):
    """Base error for the API catalog."""
    pass


class ConfigurationError(CatalogSearchError):
    """Missing or invalid configuration."""
    pass


class DocumentError(CatalogSearchError):
    """OpenAPI document could not be read or is malformed."""
    pass


class EmbeddingError(CatalogSearchError):
    """Embedding provider failed to produce a vector."""
    pass


class CatalogError(CatalogSearchError):
    """Catalog store rejected a read or write."""
    pass


class CatalogConnectionError(CatalogError):
    """Catalog store could not be reached."""
    pass


class UsageError(CatalogSearchError):
    """Command line arguments are missing or invalid."""
    pass

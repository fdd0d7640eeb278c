"""
OpenAPI Document Loading for API Catalog

Loads deployed OpenAPI documents from JSON or YAML files and walks their
operations in declared order.

Example Usage:
    from api_catalog.openapi import load_document, iter_operations

    document = load_document("sls/openapi.json")
    for path, method, operation in iter_operations(document):
        print(method, path, operation.get("summary"))
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple, Union

import yaml

from .exceptions import DocumentError

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options", "trace")


def load_document(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load an OpenAPI document.

    Args:
        file_path: Path to a .json, .yaml or .yml file

    Returns:
        Parsed document

    Raises:
        DocumentError: If the file cannot be read or parsed
    """
    file_path = Path(file_path)
    logger.info(f"Loading OpenAPI document: {file_path}")

    try:
        with open(file_path) as f:
            if file_path.suffix in [".yaml", ".yml"]:
                document = string_keys(yaml.safe_load(f))
            elif file_path.suffix == ".json":
                document = json.load(f)
            else:
                raise DocumentError(f"Unsupported file type: {file_path.suffix}")
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentError(f"Failed to read {file_path}: {e}") from e

    validate_document(document)
    return document


def validate_document(document: Any) -> None:
    """Check the parts of the document ingestion relies on.

    Raises:
        DocumentError: If the document has no usable `paths` mapping
    """
    if not isinstance(document, dict):
        raise DocumentError("OpenAPI document must be a mapping")

    paths = document.get("paths")
    if not isinstance(paths, dict):
        raise DocumentError("OpenAPI document has no 'paths' mapping")

    info = document.get("info", {})
    if info is not None and not isinstance(info, dict):
        raise DocumentError("OpenAPI 'info' must be a mapping")


def iter_operations(
    document: Dict[str, Any],
) -> Iterator[Tuple[str, str, Dict[str, Any]]]:
    """Yield (path, method, operation) for every operation in the document.

    Methods are yielded lowercase as declared. Path-level keys such as
    `parameters` or `servers` are skipped.
    """
    for path, path_item in document.get("paths", {}).items():
        if not isinstance(path_item, dict):
            logger.warning(f"Invalid path data for {path}")
            continue

        for method, operation in path_item.items():
            if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            yield path, method.lower(), operation


def string_keys(value: Any) -> Any:
    """Copy of `value` with every mapping key as a string.

    YAML reads unquoted keys such as `200:` as ints; OpenAPI keys are
    always strings.
    """
    if isinstance(value, dict):
        return {str(key): string_keys(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [string_keys(item) for item in value]
    return value


def json_schema(container: Any) -> Any:
    """Return `content["application/json"].schema` of a body or response."""
    if not isinstance(container, dict):
        return None
    content = container.get("content") or {}
    media = content.get("application/json") or {}
    return media.get("schema")

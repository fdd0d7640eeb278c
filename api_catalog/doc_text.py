"""Canonical documentation text for an OpenAPI operation.

The text is what gets embedded, so identical operations must always render
to identical strings. Absent fields are left out rather than rendered empty.
"""

import json
from typing import Any, Dict, List

from .openapi import json_schema, string_keys


def function_name(package_name: str, method: str, path: str, operation: Dict[str, Any]) -> str:
    """Declared operationId, or `<package>-<method>-<path>` with slashes as dashes."""
    operation_id = operation.get("operationId")
    if operation_id:
        return operation_id
    name = f"{package_name}-{method.lower()}{path.replace('/', '-')}"
    return name.strip("-")


def serialize_schema(schema: Any) -> str:
    """Compact, key-sorted JSON; YAML dates and other scalars render via `str`."""
    return json.dumps(
        string_keys(schema),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def build_doc_text(
    path: str, method: str, operation: Dict[str, Any], package_name: str
) -> str:
    """Render one operation as labeled sections.

    Args:
        path: OpenAPI path template, e.g. `/send-single-email`
        method: HTTP method in any case
        operation: OpenAPI operation object
        package_name: Name of the deployed package owning the operation

    Returns:
        Newline separated text, sections in fixed order
    """
    method = method.upper()
    summary = operation.get("summary")
    description = operation.get("description")
    instructions = operation.get("instructions")

    lines: List[str] = [f"ENDPOINT_PATH: {method} {path}"]
    if summary:
        lines.append(f"SUMMARY: {summary}")
    if description:
        lines.append(f"DESCRIPTION: {description}")

    lines.append("LAMBDA_FUNCTION:")
    lines.append(f"Name: {function_name(package_name, method, path, operation)}")
    lines.append(f"Path: {path}")
    lines.append(f"Method: {method}")
    if description:
        lines.append(f"Description: {description}")
    if summary:
        lines.append(f"Summary: {summary}")
    if instructions:
        lines.append(f"Instructions: {instructions}")

    request_schema = json_schema(operation.get("requestBody"))
    if request_schema is not None:
        lines.append(f"REQUEST_SCHEMA: {serialize_schema(request_schema)}")

    responses = operation.get("responses") or {}
    response_lines = []
    for status, response in responses.items():
        schema = json_schema(response)
        if schema is not None:
            response_lines.append(f"{status} -> {serialize_schema(schema)}")
    if response_lines:
        lines.append("RESPONSES:")
        lines.extend(response_lines)

    return "\n".join(lines)

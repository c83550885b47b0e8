"""Walk the spec's path table and build EndpointDescriptor rows.

One descriptor per (path, method), paths in source order, methods in the
fixed order GET, POST, PUT, DELETE, PATCH. Nothing is dropped for incomplete
metadata: missing parameters, request bodies, and responses become empty.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .models import (
    HTTP_METHODS,
    PARAM_LOCATIONS,
    EndpointDescriptor,
    Parameter,
    RequestBody,
    Response,
    Schema,
)
from .schema_parser import parse_schema

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def _deref(
    node: Any, components: Mapping[str, Any] | None, section: str,
) -> Any:
    """Follow a local #/components/<section>/<name> pointer, if there is one."""
    if not isinstance(node, dict) or "$ref" not in node:
        return node
    ref = str(node["$ref"])
    prefix = f"#/components/{section}/"
    if components is None or not ref.startswith(prefix):
        logger.debug("Cannot follow %s reference %s", section, ref)
        return None
    return (components.get(section) or {}).get(ref[len(prefix):])


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _parse_content(content: Any) -> dict[str, Schema]:
    if not isinstance(content, dict):
        return {}
    return {
        str(ct): parse_schema(media.get("schema") if isinstance(media, dict) else None)
        for ct, media in content.items()
    }


def _parse_parameter(raw: dict[str, Any]) -> Parameter:
    location = raw.get("in") if raw.get("in") in PARAM_LOCATIONS else "query"
    return Parameter(
        name=str(raw["name"]),
        location=location,
        # A path parameter has to be present to build the URL
        required=bool(raw.get("required", False)) or location == "path",
        param_schema=parse_schema(raw.get("schema")),
        description=_text(raw.get("description")),
    )


def _parse_parameters(
    shared: Any, own: Any, components: Mapping[str, Any] | None,
) -> tuple[Parameter, ...]:
    """Merge path-level and operation-level parameters.

    Operation-level entries replace path-level ones with the same name and
    location, keeping the path-level position.
    """
    merged: dict[tuple[str, str], Parameter] = {}
    for group in (shared, own):
        if not isinstance(group, list):
            continue
        for raw in group:
            raw = _deref(raw, components, "parameters")
            if not isinstance(raw, dict) or "name" not in raw:
                logger.debug("Skipping parameter without a name: %r", raw)
                continue
            param = _parse_parameter(raw)
            merged[(param.name, param.location)] = param
    return tuple(merged.values())


def _parse_request_body(raw: Any, components: Mapping[str, Any] | None) -> RequestBody | None:
    raw = _deref(raw, components, "requestBodies")
    if not isinstance(raw, dict):
        return None
    return RequestBody(
        required=bool(raw.get("required", False)),
        content=_parse_content(raw.get("content")),
    )


def _parse_responses(raw: Any, components: Mapping[str, Any] | None) -> dict[str, Response]:
    if not isinstance(raw, dict):
        return {}
    responses: dict[str, Response] = {}
    for status, resp in raw.items():
        resp = _deref(resp, components, "responses")
        if not isinstance(resp, dict):
            resp = {}
        responses[str(status)] = Response(
            description=_text(resp.get("description")),
            content=_parse_content(resp.get("content")),
        )
    return responses


def build_endpoint(
    path: str,
    method: str,
    operation: dict[str, Any],
    shared_parameters: Any = None,
    components: Mapping[str, Any] | None = None,
) -> EndpointDescriptor:
    """Build the descriptor for a single operation object."""
    operation_id = operation.get("operationId")
    tags = operation.get("tags")
    return EndpointDescriptor(
        path=path,
        method=method.upper(),
        operation_id=operation_id if isinstance(operation_id, str) and operation_id else None,
        summary=_text(operation.get("summary")),
        description=_text(operation.get("description")),
        tags=tuple(str(t) for t in tags) if isinstance(tags, list) else (),
        parameters=_parse_parameters(shared_parameters, operation.get("parameters"), components),
        request_body=_parse_request_body(operation.get("requestBody"), components),
        responses=_parse_responses(operation.get("responses"), components),
    )


def extract_endpoints(
    paths: Mapping[str, Any],
    components: Mapping[str, Any] | None = None,
) -> list[EndpointDescriptor]:
    """Extract every operation from the paths mapping, in source order."""
    endpoints: list[EndpointDescriptor] = []

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        operations = {
            str(key).upper(): value
            for key, value in path_item.items()
            if isinstance(value, dict)
        }
        for method in HTTP_METHODS:
            operation = operations.get(method)
            if operation is None:
                continue
            endpoints.append(build_endpoint(
                str(path), method, operation, path_item.get("parameters"), components,
            ))

    logger.debug("Extracted %d endpoints from %d paths", len(endpoints), len(paths))
    return endpoints


def preferred_schema(content: Mapping[str, Schema]) -> Schema | None:
    """Pick application/json, then any other JSON type, then the first entry."""
    if not content:
        return None
    if JSON_CONTENT_TYPE in content:
        return content[JSON_CONTENT_TYPE]
    for content_type, schema in content.items():
        if "json" in content_type:
            return schema
    return next(iter(content.values()))


def _success_codes(endpoint: EndpointDescriptor) -> list[str]:
    """Declared 2xx status codes in ascending numeric order."""
    return sorted(
        (status for status in endpoint.responses
         if status.isdigit() and len(status) == 3 and status.startswith("2")),
        key=int,
    )


def success_status(endpoint: EndpointDescriptor) -> str | None:
    """First 2xx status that declares a schema, else the lowest 2xx, else None."""
    codes = _success_codes(endpoint)
    for status in codes:
        if endpoint.responses[status].content:
            return status
    return codes[0] if codes else None


def success_schema(endpoint: EndpointDescriptor) -> Schema | None:
    """Schema of the first 2xx response that declares content, or None."""
    status = success_status(endpoint)
    if status is None:
        return None
    return preferred_schema(endpoint.responses[status].content)


def body_schema(endpoint: EndpointDescriptor) -> Schema | None:
    if endpoint.request_body is None:
        return None
    return preferred_schema(endpoint.request_body.content)

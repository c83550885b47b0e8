"""Translate OpenAPI schema nodes into TypeScript type expressions.

Handles:
- $ref -> declaration name (never expanded, so reference cycles are harmless)
- enum -> literal union, source order kept
- string / number / integer / boolean primitives
- arrays (Array<T>, or any[] without items)
- objects with properties -> multi-line record, `?` for optional keys
- objects without properties -> Record<string, any>
- anything else -> any
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .errors import SchemaError
from .models import (
    ArraySchema,
    ObjectSchema,
    PrimitiveSchema,
    RefSchema,
    Schema,
    UnknownSchema,
)
from .naming import is_identifier, to_type_identifier

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = ("string", "number", "integer", "boolean")
UNKNOWN_TYPE = "any"
OPEN_MAPPING = "Record<string, any>"
INDENT = "  "

_PRIMITIVE_TS: dict[str, str] = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
}


def _node_type(node: dict[str, Any]) -> str | None:
    """Return the declared type, unwrapping 3.1 style ["string", "null"] lists."""
    declared = node.get("type")
    if isinstance(declared, list):
        non_null = [t for t in declared if t != "null"]
        declared = non_null[0] if len(non_null) == 1 else None
    return declared if isinstance(declared, str) else None


def _variant_tags(node: dict[str, Any]) -> list[str]:
    declared = _node_type(node)
    tags = []
    if "$ref" in node:
        tags.append("ref")
    if isinstance(node.get("enum"), list) or declared in PRIMITIVE_TYPES:
        tags.append("primitive")
    if "items" in node or declared == "array":
        tags.append("array")
    if "properties" in node or declared == "object":
        tags.append("object")
    return tags


def parse_schema(node: Any) -> Schema:
    """Build a Schema variant from a raw schema mapping.

    Raises SchemaError when the node carries more than one variant tag
    (e.g. both $ref and properties), or when it contains itself, which
    YAML aliases allow. Nodes with no tag become UnknownSchema.
    """
    return _parse(node, set())


def _parse(node: Any, active: set[int]) -> Schema:
    if not isinstance(node, dict):
        return UnknownSchema()
    if id(node) in active:
        raise SchemaError("Schema node contains itself (recursive YAML alias); use $ref instead")
    active.add(id(node))
    try:
        return _parse_node(node, active)
    finally:
        active.discard(id(node))


def _parse_node(node: dict[str, Any], active: set[int]) -> Schema:
    description = node.get("description")
    description = description if isinstance(description, str) else ""
    tags = _variant_tags(node)
    if len(tags) > 1:
        raise SchemaError(f"Ambiguous schema node ({' + '.join(tags)}): {node!r}")
    if not tags:
        return UnknownSchema(description=description)

    tag = tags[0]
    if tag == "ref":
        return RefSchema(ref=str(node["$ref"]), description=description)

    if tag == "primitive":
        enum = node.get("enum")
        return PrimitiveSchema(
            type=_node_type(node),
            format=node.get("format") if isinstance(node.get("format"), str) else None,
            enum=tuple(enum) if isinstance(enum, list) else None,
            description=description,
        )

    if tag == "array":
        items = node.get("items")
        return ArraySchema(
            items=_parse(items, active) if isinstance(items, dict) else None,
            description=description,
        )

    raw_props = node.get("properties")
    raw_required = node.get("required")
    return ObjectSchema(
        properties=(
            {str(k): _parse(v, active) for k, v in raw_props.items()}
            if isinstance(raw_props, dict) else None
        ),
        required=frozenset(
            str(r) for r in raw_required
        ) if isinstance(raw_required, list) else frozenset(),
        description=description,
    )


def ts_literal(value: Any) -> str | None:
    """Render a primitive value as a TypeScript literal type, or None."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        escaped = (
            value.replace("\\", "\\\\")
            .replace("'", "\\'")
            .replace("\n", "\\n")
            .replace("\r", "\\r")
        )
        return f"'{escaped}'"
    return None


def property_key(name: str) -> str:
    """Quote a record key unless it is already a valid identifier."""
    return name if is_identifier(name) else ts_literal(name)


class SchemaResolver:
    """Resolve Schema variants to TypeScript type expressions.

    type_names maps component schema names to their emitted declaration
    names. When given, references to names outside it are logged.
    Resolution is pure: the resolver holds no state beyond that table.
    """

    def __init__(self, type_names: Mapping[str, str] | None = None):
        self.type_names = type_names

    def resolve(self, schema: Schema | None, name_hint: str | None = None, *, depth: int = 0) -> str:
        """Return the type expression for schema; records indent from depth."""
        if schema is None:
            return UNKNOWN_TYPE

        if isinstance(schema, RefSchema):
            return self._ref_name(schema, name_hint)

        if isinstance(schema, PrimitiveSchema):
            if schema.enum:
                literals = [lit for lit in (ts_literal(v) for v in schema.enum) if lit is not None]
                if literals:
                    return " | ".join(literals)
            return _PRIMITIVE_TS.get(schema.type or "", UNKNOWN_TYPE)

        if isinstance(schema, ArraySchema):
            if schema.items is None:
                return f"{UNKNOWN_TYPE}[]"
            return f"Array<{self.resolve(schema.items, name_hint, depth=depth)}>"

        if isinstance(schema, ObjectSchema):
            if not schema.properties:
                return OPEN_MAPPING
            return self._record(schema, depth)

        logger.debug("Schema %s has no recognisable shape; using %s",
                     name_hint or "<inline>", UNKNOWN_TYPE)
        return UNKNOWN_TYPE

    def _ref_name(self, schema: RefSchema, name_hint: str | None) -> str:
        name = schema.name
        if not name:
            return UNKNOWN_TYPE
        if self.type_names is None:
            return to_type_identifier(name)
        if name not in self.type_names:
            logger.warning("Unresolved reference %s in %s", schema.ref, name_hint or "<inline>")
            return to_type_identifier(name)
        return self.type_names[name]

    def _record(self, schema: ObjectSchema, depth: int) -> str:
        pad = INDENT * (depth + 1)
        lines = []
        for key, prop in (schema.properties or {}).items():
            optional = "" if key in schema.required else "?"
            prop_type = self.resolve(prop, key, depth=depth + 1)
            lines.append(f"{pad}{property_key(key)}{optional}: {prop_type};")
        return "{\n" + "\n".join(lines) + "\n" + INDENT * depth + "}"

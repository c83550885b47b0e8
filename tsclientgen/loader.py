"""Load an OpenAPI document and turn it into a SpecDocument.

JSON files are read with json, everything else with PyYAML (a superset of
JSON). Any failure to read or parse surfaces as SpecLoadError.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import SpecLoadError
from .models import SpecDocument
from .schema_parser import parse_schema


def load_raw(path: Path) -> dict[str, Any]:
    """Read and parse the document at path into a plain mapping."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecLoadError(f"Cannot read {path}: {e}") from e

    try:
        if Path(path).suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SpecLoadError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise SpecLoadError(f"{path} does not contain a mapping at the top level")
    return data


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    paths = spec.get("paths")
    return paths if isinstance(paths, dict) else {}


def get_components(spec: dict[str, Any]) -> dict[str, Any]:
    components = spec.get("components")
    return components if isinstance(components, dict) else {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    schemas = get_components(spec).get("schemas")
    return schemas if isinstance(schemas, dict) else {}


def parse_document(spec: dict[str, Any]) -> SpecDocument:
    """Build a SpecDocument from an already-parsed mapping."""
    if not isinstance(spec, dict):
        raise SpecLoadError("Spec document must be a mapping")

    info = spec.get("info") if isinstance(spec.get("info"), dict) else {}
    servers = spec.get("servers") if isinstance(spec.get("servers"), list) else []
    return SpecDocument(
        title=str(info.get("title") or ""),
        version=str(info.get("version") or ""),
        description=str(info.get("description") or ""),
        servers=tuple(
            str(s["url"]) for s in servers if isinstance(s, dict) and s.get("url")
        ),
        paths=get_paths(spec),
        components=get_components(spec),
        schemas={str(name): parse_schema(body) for name, body in get_schemas(spec).items()},
    )


def load_spec(path: Path) -> SpecDocument:
    """Load the OpenAPI spec from disk."""
    return parse_document(load_raw(path))

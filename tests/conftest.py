"""Shared spec fixtures for the generator tests."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest
import yaml

from tsclientgen.config import GeneratorConfig


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------

USERS_SPEC: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Users API", "version": "1.2.0"},
    "servers": [{"url": "https://api.example.com/v1"}],
    "paths": {
        "/users": {
            "get": {
                "summary": "List users",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                ],
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/User"},
                                },
                            },
                        },
                    },
                },
            },
            "post": {
                "operationId": "createUser",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/User"}},
                    },
                },
                "responses": {
                    "201": {
                        "description": "Created",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/User"}},
                        },
                    },
                    "400": {"description": "Bad request"},
                },
            },
        },
        "/users/{id}": {
            "get": {
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                    {"name": "X-Request-Id", "in": "header", "schema": {"type": "string"}},
                ],
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/User"}},
                        },
                    },
                },
            },
            "delete": {
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
                "responses": {"204": {"description": "Deleted"}},
            },
        },
    },
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                },
                "required": ["id"],
            },
        },
    },
}


@pytest.fixture
def users_spec() -> dict[str, Any]:
    return copy.deepcopy(USERS_SPEC)


@pytest.fixture
def spec_file(tmp_path: Path, users_spec: dict[str, Any]) -> Path:
    """USERS_SPEC written to disk as YAML."""
    path = tmp_path / "openapi.yaml"
    path.write_text(yaml.safe_dump(users_spec, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path: Path) -> GeneratorConfig:
    return GeneratorConfig(output_dir=tmp_path / "generated", package_name="users-client")


class RecordingSink:
    """Sink that keeps what it was handed instead of writing it."""

    def __init__(self):
        self.calls: list[list] = []

    def __call__(self, files):
        self.calls.append(list(files))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()

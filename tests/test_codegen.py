"""Tests for the codegen module."""

import json

import pytest

from tsclientgen.codegen import (
    local_module_path,
    normalize_parts,
    relative_import,
    render_files,
)
from tsclientgen.config import GeneratorConfig
from tsclientgen.endpoints import extract_endpoints
from tsclientgen.errors import GenerationError
from tsclientgen.loader import parse_document


def _render(spec, config):
    document = parse_document(spec)
    files = render_files(document, extract_endpoints(document.paths, document.components), config)
    return {f.path: f.content for f in files}, [f.path for f in files]


class TestPathArithmetic:
    """Import specifiers are computed from paths alone."""

    def test_same_directory(self):
        assert relative_import("src/api-client.ts", "src/types.ts") == "./types"

    def test_parent_directory(self):
        assert relative_import("src/api/client.ts", "src/types.ts") == "../types"

    def test_child_directory(self):
        assert relative_import("index.ts", "src/types.ts") == "./src/types"

    def test_sibling_directory(self):
        assert relative_import("src/a/b.ts", "lib/c/d.ts") == "../../lib/c/d"

    def test_dot_segments(self):
        assert relative_import("src/./x/../client.ts", "src/types.ts") == "./types"

    def test_normalize_parts(self):
        assert normalize_parts(["a", ".", "b", "..", "c"]) == ["a", "c"]
        assert normalize_parts(["..", "a"]) == ["..", "a"]

    def test_local_module_path(self):
        assert local_module_path("src/api-client.ts", "./http-client") == "src/http-client.ts"
        assert local_module_path("src/api-client.ts", "../lib/http") == "lib/http.ts"
        assert local_module_path("src/api-client.ts", "./http-client.js") == "src/http-client.ts"

    def test_package_or_outside_paths_are_not_local(self):
        assert local_module_path("src/api-client.ts", "@acme/http") is None
        assert local_module_path("src/api-client.ts", "../../outside") is None


class TestRenderFiles:
    """End-to-end rendering of USERS_SPEC."""

    def test_layout(self, users_spec, config):
        _, paths = _render(users_spec, config)
        assert paths == [
            "src/types.ts",
            "src/api-client.ts",
            "src/http-client.ts",
            "src/index.ts",
            "package.json",
            "tsconfig.json",
            "README.md",
        ]

    def test_user_interface(self, users_spec, config):
        files, _ = _render(users_spec, config)
        types = files["src/types.ts"]
        assert types.startswith("/**\n * Type declarations for Users API 1.2.0.\n")
        assert types.endswith("\nexport interface User {\n  id: string;\n  name?: string;\n}\n")
        assert types.count("export interface User ") == 1

    def test_client_imports(self, users_spec, config):
        client = _render(users_spec, config)[0]["src/api-client.ts"]
        assert "import type { HttpClient } from './http-client';\n" in client
        assert "import type {\n  User,\n} from './types';\n" in client
        assert "private readonly baseUrl: string = 'https://api.example.com/v1'," in client

    def test_get_users_method(self, users_spec, config):
        client = _render(users_spec, config)[0]["src/api-client.ts"]
        assert (
            "  /**\n"
            "   * List users\n"
            "   *\n"
            "   * GET /users\n"
            "   */\n"
            "  async getUsers(limit?: number): Promise<Array<User>> {\n"
            "    const response = await this.http.get(`${this.baseUrl}/users`, { params: { limit } });\n"
            "    return response.data;\n"
            "  }\n"
        ) in client

    def test_no_success_schema(self, users_spec, config):
        client = _render(users_spec, config)[0]["src/api-client.ts"]
        assert "async deleteUsers(id: string): Promise<any> {" in client

    def test_transport_interface(self, users_spec, config):
        http = _render(users_spec, config)[0]["src/http-client.ts"]
        for verb in ("get(url: string, options", "post(url: string, data", "put(url: string, data",
                     "delete(url: string, options", "patch(url: string, data"):
            assert verb in http
        assert "export interface HttpClient {" in http

    def test_index(self, users_spec, config):
        index = _render(users_spec, config)[0]["src/index.ts"]
        assert index == (
            "export * from './types';\n"
            "export * from './api-client';\n"
            "export * from './http-client';\n"
        )

    def test_package_json(self, users_spec, config):
        package = json.loads(_render(users_spec, config)[0]["package.json"])
        assert package["name"] == "users-client"
        assert package["version"] == "1.2.0"
        assert package["types"] == "dist/index.d.ts"

    def test_tsconfig_is_json(self, users_spec, config):
        tsconfig = json.loads(_render(users_spec, config)[0]["tsconfig.json"])
        assert tsconfig["compilerOptions"]["rootDir"] == "src"

    def test_deterministic(self, users_spec, config):
        assert _render(users_spec, config) == _render(users_spec, config)


class TestTransportImport:
    def test_external_package(self, users_spec, tmp_path):
        config = GeneratorConfig(output_dir=tmp_path, http_client_import="@acme/http")
        files, paths = _render(users_spec, config)
        assert "src/http-client.ts" not in paths
        assert "import type { HttpClient } from '@acme/http';" in files["src/api-client.ts"]
        assert "export type { HttpClient } from '@acme/http';" in files["src/index.ts"]

    def test_nested_local_directory(self, users_spec, tmp_path):
        config = GeneratorConfig(output_dir=tmp_path, http_client_import="./transport/http")
        files, paths = _render(users_spec, config)
        assert "src/transport/http.ts" in paths
        assert "export * from './transport/http';" in files["src/index.ts"]

    def test_local_module_outside_source_dir(self, users_spec, tmp_path):
        config = GeneratorConfig(output_dir=tmp_path, http_client_import="../shared/http")
        with pytest.raises(GenerationError, match="outside src/"):
            _render(users_spec, config)

    def test_clash_with_types_file(self, users_spec, tmp_path):
        config = GeneratorConfig(output_dir=tmp_path, http_client_import="./types")
        with pytest.raises(GenerationError):
            _render(users_spec, config)


class TestEdgeSpecs:
    def test_empty_spec(self, config):
        files, _ = _render({}, config)
        assert files["src/types.ts"].endswith("\nexport {};\n")
        client = files["src/api-client.ts"]
        assert "from './types'" not in client
        assert "export class ApiClient {" in client
        assert "baseUrl: string = ''," in client

    def test_no_2xx_returns_any(self, config):
        spec = {"paths": {"/health": {"get": {"responses": {
            "500": {"content": {"application/json": {"schema": {"type": "string"}}}},
        }}}}}
        client = _render(spec, config)[0]["src/api-client.ts"]
        assert "async getHealth(): Promise<any> {" in client

    def test_later_2xx_response_type(self, config):
        spec = {"paths": {"/jobs": {"post": {"responses": {
            "200": {"description": "Queued"},
            "201": {"content": {"application/json": {"schema": {"type": "string"}}}},
        }}}}}
        client = _render(spec, config)[0]["src/api-client.ts"]
        assert "async postJobs(): Promise<string> {" in client

    def test_method_names_are_identifiers(self, config):
        spec = {"paths": {
            "/user-profiles": {"get": {"responses": {}}},
            "/lists": {"get": {"operationId": "users.list", "responses": {}}},
        }}
        client = _render(spec, config)[0]["src/api-client.ts"]
        assert "async getUserProfiles(): Promise<any> {" in client
        assert "async usersList(): Promise<any> {" in client

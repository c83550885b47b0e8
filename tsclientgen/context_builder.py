"""Build Jinja2 template contexts from a SpecDocument and its endpoints.

Names every declaration, resolves each component schema once, and turns
each EndpointDescriptor into the pieces of one ApiClient method: argument
list, URL expression, options bag and return type.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable

from .endpoints import body_schema, success_schema
from .models import (
    EndpointDescriptor,
    ObjectSchema,
    Parameter,
    PrimitiveSchema,
    Schema,
    SpecDocument,
)
from .naming import (
    NameRegistry,
    capitalize,
    deduplicate_method_names,
    to_identifier,
    to_type_identifier,
    type_name,
)
from .schema_parser import UNKNOWN_TYPE, SchemaResolver, property_key, ts_literal

logger = logging.getLogger(__name__)

CLIENT_CLASS = "ApiClient"
TRANSPORT_INTERFACE = "HttpClient"

# Names the generated client files declare themselves
_BUILTIN_NAMES = (CLIENT_CLASS, TRANSPORT_INTERFACE, "RequestOptions", "HttpResponse")

# Transport verbs that take a payload argument before the options bag
_PAYLOAD_METHODS = {"post", "put", "patch"}

# Locals used inside every generated method body
_METHOD_LOCALS = ("response",)

_PATH_PARAM_RE = re.compile(r"\{([^}/]+)\}")


class TypeCache:
    """Resolved declaration per component schema name, written once per name."""

    def __init__(self):
        self._entries: dict[str, dict[str, Any]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_resolve(self, name: str, factory: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        if name not in self._entries:
            self._entries[name] = factory()
        return self._entries[name]

    def values(self) -> list[dict[str, Any]]:
        return list(self._entries.values())


def _doc_lines(*parts: str) -> list[str]:
    """Split doc text into comment lines, neutralising */ sequences."""
    lines: list[str] = []
    for part in parts:
        if not part:
            continue
        if lines:
            lines.append("")
        lines.extend(line.rstrip().replace("*/", "*\\/") for line in part.strip().splitlines())
    return lines


def _method_doc(endpoint: EndpointDescriptor, param_docs: list[tuple[str, str]]) -> list[str]:
    lines = _doc_lines(endpoint.summary, endpoint.description)
    if lines:
        lines.append("")
    lines.append(f"{endpoint.method} {endpoint.path}")
    lines.extend(f"@param {ident} {text}" for ident, text in param_docs)
    return lines


def _is_record(schema: Schema | None) -> bool:
    return isinstance(schema, ObjectSchema) and bool(schema.properties)


def _template_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class ContextBuilder:
    """Per-run emitter state: type names, resolver, declaration cache.

    Build one per generation run; nothing here is shared between runs.
    """

    def __init__(self, document: SpecDocument):
        self.document = document
        self.type_registry = NameRegistry(_BUILTIN_NAMES)
        self.type_names: dict[str, str] = {
            name: self.type_registry.claim(to_type_identifier(name))
            for name in document.schemas
        }
        self.resolver = SchemaResolver(self.type_names)
        self.cache = TypeCache()
        # Inline request/response records promoted to named interfaces
        self.hoisted: list[dict[str, Any]] = []

    # -- types ---------------------------------------------------------------

    def _declaration(self, ident: str, schema: Schema, hint: str) -> dict[str, Any]:
        return {
            "name": ident,
            "kind": "interface" if _is_record(schema) else "alias",
            "body": self.resolver.resolve(schema, hint),
            "doc": _doc_lines(schema.description),
        }

    def declare_schema(self, name: str) -> dict[str, Any]:
        """Resolve the named component schema, reusing the cached result."""
        return self.cache.get_or_resolve(
            name,
            lambda: self._declaration(self.type_names[name], self.document.schemas[name], name),
        )

    def declare_all(self) -> None:
        for name in self.document.schemas:
            self.declare_schema(name)

    def build_types_context(self) -> dict[str, Any]:
        self.declare_all()
        return {
            "title": self.document.title,
            "version": self.document.version,
            "declarations": self.cache.values() + self.hoisted,
        }

    def declared_names(self) -> list[str]:
        return [d["name"] for d in self.cache.values() + self.hoisted]

    def _hoist(self, endpoint: EndpointDescriptor, schema: Schema, suffix: str) -> str:
        base = type_name(endpoint.path) + capitalize(endpoint.method.lower()) + suffix
        ident = self.type_registry.claim(to_type_identifier(base))
        self.hoisted.append(self._declaration(ident, schema, ident))
        return ident

    def _schema_type(self, endpoint: EndpointDescriptor, schema: Schema | None, suffix: str) -> str:
        if schema is None:
            return UNKNOWN_TYPE
        if _is_record(schema):
            return self._hoist(endpoint, schema, suffix)
        return self.resolver.resolve(schema, f"{endpoint.method} {endpoint.path} {suffix}", depth=1)

    # -- client --------------------------------------------------------------

    def _path_parameters(self, endpoint: EndpointDescriptor) -> list[Parameter]:
        """Declared parameters plus any {name} in the template left undeclared."""
        params = list(endpoint.parameters)
        declared = {p.name for p in params if p.location == "path"}
        for name in _PATH_PARAM_RE.findall(endpoint.path):
            if name not in declared:
                logger.debug("%s %s: undeclared path parameter %s", endpoint.method, endpoint.path, name)
                params.append(Parameter(
                    name=name, location="path", required=True,
                    param_schema=PrimitiveSchema(type="string"),
                ))
                declared.add(name)
        return params

    def build_method(self, endpoint: EndpointDescriptor, name: str) -> dict[str, Any]:
        """Template context for one client method."""
        verb = endpoint.method.lower()
        arg_names = NameRegistry(_METHOD_LOCALS)
        body_arg = arg_names.claim("body") if endpoint.request_body is not None else None

        required_args: list[str] = []
        optional_args: list[str] = []
        path_args: dict[str, str] = {}
        query: list[str] = []
        headers: list[str] = []
        param_docs: list[tuple[str, str]] = []

        for param in self._path_parameters(endpoint):
            if param.location == "cookie":
                logger.debug("%s %s: cookie parameter %s is not surfaced",
                             endpoint.method, endpoint.path, param.name)
                continue
            ident = arg_names.claim(to_identifier(param.name))
            param_type = self.resolver.resolve(param.param_schema, param.name, depth=1)
            if param.required:
                required_args.append(f"{ident}: {param_type}")
            else:
                optional_args.append(f"{ident}?: {param_type}")
            described = _doc_lines(param.description)
            if described:
                param_docs.append((ident, described[0]))

            if param.location == "path":
                path_args[param.name] = ident
                continue
            if param.name == ident:
                entry = ident
            else:
                entry = f"{property_key(param.name)}: {ident}"
            (query if param.location == "query" else headers).append(entry)

        args = list(required_args)
        if body_arg is not None:
            body_type = self._schema_type(endpoint, body_schema(endpoint), "Body")
            required = endpoint.request_body.required
            args.append(f"{body_arg}{'' if required else '?'}: {body_type}")
        args.extend(optional_args)

        options = []
        if query:
            options.append("params: { " + ", ".join(query) + " }")
        if headers:
            options.append("headers: { " + ", ".join(headers) + " }")

        call_args = [self._url_expression(endpoint.path, path_args)]
        if verb in _PAYLOAD_METHODS:
            call_args.append(body_arg or "undefined")
        if options:
            call_args.append("{ " + ", ".join(options) + " }")

        return {
            "name": name,
            "verb": verb,
            "method": endpoint.method,
            "path": endpoint.path,
            "signature": ", ".join(args),
            "return_type": self._schema_type(endpoint, success_schema(endpoint), "Response"),
            "call_args": ", ".join(call_args),
            "doc": _method_doc(endpoint, param_docs),
            "tags": list(endpoint.tags),
        }

    @staticmethod
    def _url_expression(path: str, path_args: dict[str, str]) -> str:
        pieces = []
        last = 0
        for match in _PATH_PARAM_RE.finditer(path):
            pieces.append(_template_literal(path[last:match.start()]))
            ident = path_args.get(match.group(1))
            if ident is None:
                pieces.append(_template_literal(match.group(0)))
            else:
                pieces.append("${encodeURIComponent(String(" + ident + "))}")
            last = match.end()
        pieces.append(_template_literal(path[last:]))
        return "`${this.baseUrl}" + "".join(pieces) + "`"

    def build_client_context(
        self, endpoints: list[EndpointDescriptor], http_client_import: str, types_import: str,
    ) -> dict[str, Any]:
        self.declare_all()
        names = deduplicate_method_names(endpoints)
        methods = [self.build_method(ep, name) for ep, name in zip(endpoints, names)]
        servers = self.document.servers
        return {
            "title": self.document.title,
            "version": self.document.version,
            "description": _doc_lines(self.document.description),
            "client_class": CLIENT_CLASS,
            "transport": TRANSPORT_INTERFACE,
            "http_client_import": http_client_import,
            "types_import": types_import,
            # Read after methods are built so hoisted records are included
            "type_imports": self.declared_names(),
            "base_url": ts_literal(servers[0] if servers else ""),
            "methods": methods,
        }

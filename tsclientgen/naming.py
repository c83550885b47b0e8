"""Derive TypeScript method and type names from HTTP method + path.

Pattern: {verb}{Segment}{Segment}...
  - the verb is the lower-cased HTTP method
  - path parameters ({id}) and empty segments are dropped
  - every remaining segment has its first letter capitalised

Examples:
  GET    /users                -> getUsers
  GET    /users/{id}/orders    -> getUsersOrders
  POST   /users                -> postUsers
  DELETE /a/{id}/b             -> deleteAB

An explicit operationId always wins and is used verbatim.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from .models import EndpointDescriptor

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_WORD_SPLIT_RE = re.compile(r"[^A-Za-z0-9_$]+")

# Words that cannot be used as bare argument names in generated code
_RESERVED: frozenset[str] = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "let", "static", "yield",
    "await", "implements", "interface", "package", "private", "protected",
    "public",
})


def capitalize(text: str) -> str:
    """Upper-case the first letter, leave the rest untouched."""
    return text[:1].upper() + text[1:]


def _path_segments(path: str) -> list[str]:
    """Non-empty, non-parameter path segments in order."""
    return [s for s in path.split("/") if s and not s.startswith("{")]


def type_name(path: str) -> str:
    """Build a type name from a path template: /users/{id}/orders -> UsersOrders."""
    return "".join(capitalize(s) for s in _path_segments(path))


def method_name(method: str, path: str, operation_id: str | None = None) -> str:
    """Build a client method name from HTTP method and path.

    Returns the operation id unchanged when one is given.
    """
    if operation_id:
        return operation_id
    return method.lower() + type_name(path)


def is_identifier(text: str) -> bool:
    return bool(_IDENTIFIER_RE.match(text))


def to_identifier(text: str) -> str:
    """Turn an arbitrary key (X-Request-Id, page.size) into a camelCase identifier."""
    if is_identifier(text) and text not in _RESERVED:
        return text
    words = [w for w in _WORD_SPLIT_RE.split(text) if w]
    if not words:
        return "_"
    name = words[0][:1].lower() + words[0][1:] + "".join(capitalize(w) for w in words[1:])
    if name[0].isdigit():
        name = "_" + name
    if name in _RESERVED:
        name += "_"
    return name


def to_type_identifier(name: str) -> str:
    """Turn a schema name (user-model, v1.User) into a PascalCase identifier."""
    if is_identifier(name):
        return name
    words = [w for w in _WORD_SPLIT_RE.split(name) if w]
    if not words:
        return "_"
    ident = "".join(capitalize(w) for w in words)
    if ident[0].isdigit():
        ident = "_" + ident
    return ident


class NameRegistry:
    """Hand out unique names in claim order: name, name2, name3, ...

    One registry per namespace per run; never shared between runs.
    """

    def __init__(self, taken: Iterable[str] = ()):
        self._taken: set[str] = set(taken)

    def __contains__(self, name: str) -> bool:
        return name in self._taken

    def claim(self, name: str) -> str:
        if name not in self._taken:
            self._taken.add(name)
            return name
        counter = 2
        while f"{name}{counter}" in self._taken:
            counter += 1
        unique = f"{name}{counter}"
        self._taken.add(unique)
        return unique


def _path_param_suffix(path: str) -> str:
    params = [s[1:-1] for s in path.split("/") if s.startswith("{") and s.endswith("}")]
    if not params:
        return ""
    return "By" + "And".join(capitalize(to_identifier(p)) for p in params)


def deduplicate_method_names(endpoints: list[EndpointDescriptor]) -> list[str]:
    """Return one unique method name per endpoint, in endpoint order.

    Names are made into valid identifiers first (users.list -> usersList).
    The first endpoint to produce a name keeps it. A later derived name whose
    path has parameters tries the ByParam form (getUsers -> getUsersById)
    before falling back to a numeric suffix.
    """
    registry = NameRegistry()
    names: list[str] = []
    for ep in endpoints:
        raw = method_name(ep.method, ep.path, ep.operation_id)
        base = to_identifier(raw)
        if base != raw:
            logger.debug("Method name %s for %s %s is not an identifier; using %s",
                         raw, ep.method, ep.path, base)
        name = base
        if name in registry and not ep.operation_id:
            suffix = _path_param_suffix(ep.path)
            if suffix:
                name = base + suffix
        name = registry.claim(name)
        if name != base:
            level = logging.WARNING if ep.operation_id else logging.DEBUG
            logger.log(level, "Method name %s for %s %s already taken; using %s",
                       base, ep.method, ep.path, name)
        names.append(name)
    return names

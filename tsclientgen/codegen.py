"""Render templates into GeneratedFile objects.

Takes the contexts from context_builder and produces the output layout. The
file list is only returned, never written here; import specifiers between
the files are computed with pure path arithmetic.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any, Iterable

import jinja2

from .config import GeneratorConfig
from .context_builder import ContextBuilder
from .errors import GenerationError
from .models import EndpointDescriptor, GeneratedFile, SpecDocument
from .schema_parser import ts_literal

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

TYPES_FILE = "src/types.ts"
CLIENT_FILE = "src/api-client.ts"
INDEX_FILE = "src/index.ts"
PACKAGE_FILE = "package.json"
TSCONFIG_FILE = "tsconfig.json"
README_FILE = "README.md"

# tsconfig.json compiles only this directory
SOURCE_DIR = "src"


def normalize_parts(parts: Iterable[str]) -> list[str]:
    """Collapse '.' and '..' segments without consulting the file system."""
    out: list[str] = []
    for part in parts:
        if part in ("", ".", "/"):
            continue
        if part == "..":
            if out and out[-1] != "..":
                out.pop()
            else:
                out.append("..")
        else:
            out.append(part)
    return out


def _module_parts(file_path: str) -> list[str]:
    path = PurePosixPath(file_path)
    return normalize_parts(path.with_name(path.stem).parts)


def relative_import(from_file: str, to_file: str) -> str:
    """Module specifier that from_file uses to import to_file.

    relative_import("src/api-client.ts", "src/types.ts") == "./types"
    """
    source_dir = normalize_parts(PurePosixPath(from_file).parent.parts)
    target = _module_parts(to_file)
    common = 0
    while (
        common < len(source_dir)
        and common < len(target) - 1
        and source_dir[common] == target[common]
    ):
        common += 1
    rel = [".."] * (len(source_dir) - common) + target[common:]
    spec = "/".join(rel)
    return spec if spec.startswith("..") else f"./{spec}"


def local_module_path(from_file: str, specifier: str) -> str | None:
    """Output path of a relative import, or None for packages / outside paths."""
    if not specifier.startswith(("./", "../")):
        return None
    parts = normalize_parts(
        list(PurePosixPath(from_file).parent.parts) + specifier.split("/")
    )
    if not parts or parts[0] == "..":
        return None
    stem = PurePosixPath(parts[-1])
    if stem.suffix in (".ts", ".js"):
        parts[-1] = stem.stem
    return "/".join(parts) + ".ts"


def _jsdoc(lines: list[str], indent: str = "") -> str:
    body = [f"{indent} *" + (f" {line}" if line else "") for line in lines]
    return "\n".join([f"{indent}/**", *body, f"{indent} */"])


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["jsdoc"] = _jsdoc
    env.filters["tsstr"] = ts_literal
    return env


def _collect(files: list[GeneratedFile]) -> list[GeneratedFile]:
    seen: set[str] = set()
    for f in files:
        if f.path in seen:
            raise GenerationError(f"Output path emitted twice: {f.path}")
        seen.add(f.path)
    return files


def render_files(
    document: SpecDocument,
    endpoints: list[EndpointDescriptor],
    config: GeneratorConfig,
) -> list[GeneratedFile]:
    """Render every output file for one run, in write order."""
    env = _environment()
    builder = ContextBuilder(document)

    http_file = local_module_path(CLIENT_FILE, config.http_client_import)
    if http_file is not None and not http_file.startswith(SOURCE_DIR + "/"):
        raise GenerationError(
            f"HTTP client module {config.http_client_import} resolves to {http_file}, "
            f"outside {SOURCE_DIR}/; use a path under {SOURCE_DIR}/ or a package name"
        )
    if http_file is None:
        logger.info("Transport %s is external; not emitting it", config.http_client_import)

    client_ctx = builder.build_client_context(
        endpoints,
        http_client_import=config.http_client_import,
        types_import=relative_import(CLIENT_FILE, TYPES_FILE),
    )
    # After the client so hoisted request/response records are declared too
    types_ctx = builder.build_types_context()

    shared: dict[str, Any] = {
        "title": document.title,
        "version": document.version,
        "description": document.description,
        "package_name": config.package_name,
        "client_class": client_ctx["client_class"],
        "transport": client_ctx["transport"],
        "method_count": len(client_ctx["methods"]),
        "type_count": len(types_ctx["declarations"]),
    }
    index_ctx = {
        **shared,
        "types_import": relative_import(INDEX_FILE, TYPES_FILE),
        "client_import": relative_import(INDEX_FILE, CLIENT_FILE),
        "http_client_local": http_file is not None,
        "http_client_import": (
            relative_import(INDEX_FILE, http_file) if http_file else config.http_client_import
        ),
    }

    files = [
        GeneratedFile(path=TYPES_FILE, content=env.get_template("types.ts.j2").render(**types_ctx)),
        GeneratedFile(path=CLIENT_FILE, content=env.get_template("api-client.ts.j2").render(**client_ctx)),
    ]
    if http_file is not None:
        files.append(GeneratedFile(
            path=http_file, content=env.get_template("http-client.ts.j2").render(**shared),
        ))
    files.append(GeneratedFile(path=INDEX_FILE, content=env.get_template("index.ts.j2").render(**index_ctx)))
    files.append(GeneratedFile(path=PACKAGE_FILE, content=env.get_template("package.json.j2").render(**shared)))
    files.append(GeneratedFile(path=TSCONFIG_FILE, content=env.get_template("tsconfig.json.j2").render(**shared)))
    files.append(GeneratedFile(path=README_FILE, content=env.get_template("README.md.j2").render(**shared)))

    logger.info("Rendered %d files (%d methods, %d types)",
                len(files), shared["method_count"], shared["type_count"])
    return _collect(files)

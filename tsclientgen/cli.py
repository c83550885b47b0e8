"""CLI entry point for tsclientgen."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from .config import DEFAULT_HTTP_CLIENT_IMPORT, DEFAULT_PACKAGE_NAME, GeneratorConfig
from .endpoints import extract_endpoints
from .errors import ClientGenError
from .generator import ClientGenerator
from .loader import load_spec
from .naming import deduplicate_method_names


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every stage and degraded schema.")
def main(verbose: bool):
    """Generate a TypeScript API client from an OpenAPI document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("spec_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-o", "--output", "output_dir", required=True, envvar="TSCLIENTGEN_OUTPUT_DIR",
              type=click.Path(file_okay=False, path_type=Path), help="Directory for the generated package.")
@click.option("--package-name", default=DEFAULT_PACKAGE_NAME, show_default=True,
              envvar="TSCLIENTGEN_PACKAGE_NAME", help="npm package name.")
@click.option("--http-client-import", default=DEFAULT_HTTP_CLIENT_IMPORT, show_default=True,
              envvar="TSCLIENTGEN_HTTP_CLIENT_IMPORT",
              help="Module the generated client imports HttpClient from.")
def generate(spec_path: Path, output_dir: Path, package_name: str, http_client_import: str):
    """Generate the client package for SPEC_PATH."""
    config = GeneratorConfig(
        output_dir=output_dir,
        package_name=package_name,
        http_client_import=http_client_import,
    )
    click.echo(f"Generating {package_name} from {spec_path}...")
    try:
        files = ClientGenerator(config).run(spec_path)
    except ClientGenError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for f in files:
        click.echo(f"  Created {output_dir / f.path}")
    click.echo(f"Generated {len(files)} files in {output_dir}")
    click.echo("Next steps:")
    click.echo("  1. Provide an HttpClient implementation to ApiClient")
    click.echo(f"  2. Run `npm install && npm run build` in {output_dir}")


@main.command()
@click.argument("spec_path", type=click.Path(dir_okay=False, path_type=Path))
def endpoints(spec_path: Path):
    """List the client methods SPEC_PATH would produce."""
    try:
        document = load_spec(spec_path)
        found = extract_endpoints(document.paths, document.components)
    except ClientGenError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for ep, name in zip(found, deduplicate_method_names(found)):
        click.echo(f"{ep.method:<7} {ep.path} -> {name}")
    click.echo(f"{len(found)} endpoints.")

"""Generator configuration.

Three opaque settings, no cross-validation. The CLI fills them from options
or TSCLIENTGEN_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

DEFAULT_PACKAGE_NAME = "api-client"
DEFAULT_HTTP_CLIENT_IMPORT = "./http-client"


class GeneratorConfig(BaseModel):
    """Settings for one generation run."""

    model_config = ConfigDict(frozen=True)

    output_dir: Path
    package_name: str = DEFAULT_PACKAGE_NAME
    # Module specifier used by the generated client to import HttpClient
    http_client_import: str = DEFAULT_HTTP_CLIENT_IMPORT

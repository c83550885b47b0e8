"""Exception hierarchy for client generation.

Only fatal conditions raise. Unrecognised schema shapes and missing optional
metadata degrade to defaults instead.
"""

from __future__ import annotations


class ClientGenError(Exception):
    """Base exception for generator errors."""


class SpecLoadError(ClientGenError):
    """Raised when the input document cannot be read or parsed."""


class SchemaError(ClientGenError):
    """Raised when a schema node carries more than one variant tag."""


class GenerationError(ClientGenError):
    """Raised when a run is driven out of order or emits a path twice."""


class WriteError(ClientGenError):
    """Raised when the output sink cannot persist the generated files."""

"""Data models shared by the generator stages.

Schema nodes are a tagged variant: one frozen class per shape, built only via
schema_parser.parse_schema. Every other model is produced once per run and
read-only afterwards.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")
PARAM_LOCATIONS = ("query", "path", "header", "cookie")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class PrimitiveSchema(_Frozen):
    """string / number / integer / boolean, optionally restricted to an enum."""

    type: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[tuple[Any, ...]] = None
    description: str = ""


class ArraySchema(_Frozen):
    items: Optional[Schema] = None
    description: str = ""


class ObjectSchema(_Frozen):
    properties: Optional[dict[str, Schema]] = None
    required: frozenset[str] = frozenset()
    description: str = ""


class RefSchema(_Frozen):
    ref: str
    description: str = ""

    @property
    def name(self) -> str:
        """Name of the referenced declaration (last pointer segment)."""
        return self.ref.rstrip("/").rsplit("/", 1)[-1]


class UnknownSchema(_Frozen):
    """A node with no recognisable tag. Resolves to the open type."""

    description: str = ""


Schema = Union[PrimitiveSchema, ArraySchema, ObjectSchema, RefSchema, UnknownSchema]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()


class Parameter(_Frozen):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str
    location: str = "query"
    required: bool = False
    param_schema: Schema = Field(default_factory=UnknownSchema)
    description: str = ""


class RequestBody(_Frozen):
    required: bool = False
    content: dict[str, Schema] = Field(default_factory=dict)


class Response(_Frozen):
    description: str = ""
    content: dict[str, Schema] = Field(default_factory=dict)


class EndpointDescriptor(_Frozen):
    """One (path, HTTP method) operation with all its metadata."""

    path: str
    method: str  # GET / POST / PUT / DELETE / PATCH
    operation_id: Optional[str] = None
    summary: str = ""
    description: str = ""
    tags: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    request_body: Optional[RequestBody] = None
    responses: dict[str, Response] = Field(default_factory=dict)


class SpecDocument(_Frozen):
    """Parsed input document. Owned by the driver for one run."""

    title: str = ""
    version: str = ""
    description: str = ""
    servers: tuple[str, ...] = ()
    paths: dict[str, Any] = Field(default_factory=dict)
    # Raw components table, used to follow parameter/body/response refs
    components: dict[str, Any] = Field(default_factory=dict)
    schemas: dict[str, Schema] = Field(default_factory=dict)


class GeneratedFile(_Frozen):
    """Rendered output: POSIX path relative to the output dir, plus text."""

    path: str
    content: str

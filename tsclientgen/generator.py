"""Drive one generation run: load -> extract -> resolve -> write.

    IDLE -> SPEC_LOADED -> EXTRACTED -> RESOLVED -> WRITTEN -> IDLE

Stages run strictly in order. Generated files stay in memory until write(),
so a run that fails at any stage hands nothing to the sink.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Any

from .codegen import render_files
from .config import GeneratorConfig
from .endpoints import extract_endpoints
from .errors import ClientGenError, GenerationError
from .loader import load_spec, parse_document
from .models import EndpointDescriptor, GeneratedFile, SpecDocument
from .writer import FileSink, Sink

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    IDLE = "idle"
    SPEC_LOADED = "spec_loaded"
    EXTRACTED = "extracted"
    RESOLVED = "resolved"
    WRITTEN = "written"


class ClientGenerator:
    """Generates a TypeScript client package from an OpenAPI document."""

    def __init__(self, config: GeneratorConfig, sink: Sink | None = None):
        self.config = config
        self.sink: Sink = sink if sink is not None else FileSink(config.output_dir)
        self.stage = Stage.IDLE
        self.document: SpecDocument | None = None
        self.endpoints: list[EndpointDescriptor] = []
        self.files: list[GeneratedFile] = []

    def _advance(self, expected: Stage, target: Stage) -> None:
        if self.stage is not expected:
            raise GenerationError(
                f"Cannot enter {target.value}: generator is {self.stage.value}, expected {expected.value}"
            )
        self.stage = target
        logger.info("Stage: %s", target.value)

    def reset(self) -> None:
        """Drop all per-run state and return to IDLE."""
        self.stage = Stage.IDLE
        self.document = None
        self.endpoints = []
        self.files = []

    def load_spec(self, source: Path | str | dict[str, Any]) -> SpecDocument:
        """Load a spec from a file path or an already-parsed mapping."""
        if self.stage is not Stage.IDLE:
            raise GenerationError(f"Cannot load a spec while {self.stage.value}")
        if isinstance(source, dict):
            document = parse_document(source)
        else:
            document = load_spec(Path(source))
        self.document = document
        self._advance(Stage.IDLE, Stage.SPEC_LOADED)
        return document

    def extract(self) -> list[EndpointDescriptor]:
        if self.stage is not Stage.SPEC_LOADED or self.document is None:
            raise GenerationError(f"Cannot extract endpoints while {self.stage.value}")
        self.endpoints = extract_endpoints(self.document.paths, self.document.components)
        self._advance(Stage.SPEC_LOADED, Stage.EXTRACTED)
        return self.endpoints

    def resolve(self) -> list[GeneratedFile]:
        """Resolve types and render every file, keeping them in memory."""
        if self.stage is not Stage.EXTRACTED or self.document is None:
            raise GenerationError(f"Cannot render files while {self.stage.value}")
        self.files = render_files(self.document, self.endpoints, self.config)
        self._advance(Stage.EXTRACTED, Stage.RESOLVED)
        return self.files

    def write(self) -> list[GeneratedFile]:
        if self.stage is not Stage.RESOLVED:
            raise GenerationError(f"Cannot write files while {self.stage.value}")
        self.sink(self.files)
        self._advance(Stage.RESOLVED, Stage.WRITTEN)
        return self.files

    def run(self, source: Path | str | dict[str, Any]) -> list[GeneratedFile]:
        """Run every stage; always returns to IDLE, even on failure."""
        if self.stage is not Stage.IDLE:
            raise GenerationError(f"A run is already in progress ({self.stage.value})")
        try:
            self.load_spec(source)
            self.extract()
            self.resolve()
            return self.write()
        except ClientGenError as e:
            logger.error("Generation failed after %s: %s", self.stage.value, e)
            raise
        finally:
            self.reset()

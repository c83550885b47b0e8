"""Generate a typed TypeScript API client from an OpenAPI document."""

from .config import GeneratorConfig
from .errors import ClientGenError
from .generator import ClientGenerator, Stage

__version__ = "0.1.0"
__all__ = ["ClientGenerator", "ClientGenError", "GeneratorConfig", "Stage"]

"""gql-modelgen: Pydantic models from GraphQL introspection."""

from .core import (
    GenerationError,
    ModelEmitter,
    ScalarRegistry,
    generate_types,
    generate_types_async,
)

__version__ = "0.1.0"

__all__ = [
    "GenerationError",
    "ModelEmitter",
    "ScalarRegistry",
    "generate_types",
    "generate_types_async",
]

"""Core modules for GraphQL model generation."""

from .emitter import ModelEmitter, generate_types, generate_types_async, order_declarations
from .errors import (
    ConfigurationError,
    GeneratedCodeError,
    GenerationError,
    InvariantViolation,
    SchemaDataError,
    TypeDepthExceededError,
    UnknownScalarError,
)
from .executor import GraphQLError, GraphQLExecutor
from .generator import Declaration, DeclarationGenerator, GenerationContext
from .hooks import (
    AddHeaderHook,
    FilterTypesHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from .index import TypeIndex
from .introspection import INTROSPECTION_QUERY, TYPE_REF_DEPTH, build_introspection_query
from .ir import SchemaEnumValue, SchemaField, SchemaType, TypeKind
from .parser import SchemaParser, parse_introspection
from .resolver import POLYMORPHIC_PREFIX, TypeNameResolver
from .scalars import BUILTIN_SCALARS, COMMON_SCALARS, ScalarMapping, ScalarRegistry

__all__ = [
    # Emission
    "ModelEmitter",
    "generate_types",
    "generate_types_async",
    "order_declarations",
    # Errors
    "GenerationError",
    "ConfigurationError",
    "UnknownScalarError",
    "InvariantViolation",
    "TypeDepthExceededError",
    "SchemaDataError",
    "GeneratedCodeError",
    # Executor
    "GraphQLError",
    "GraphQLExecutor",
    # Declarations
    "Declaration",
    "DeclarationGenerator",
    "GenerationContext",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "FilterTypesHook",
    "HookRunner",
    # Schema model
    "SchemaEnumValue",
    "SchemaField",
    "SchemaType",
    "TypeKind",
    "TypeIndex",
    # Introspection
    "INTROSPECTION_QUERY",
    "TYPE_REF_DEPTH",
    "build_introspection_query",
    # Parser
    "SchemaParser",
    "parse_introspection",
    # Resolution
    "POLYMORPHIC_PREFIX",
    "TypeNameResolver",
    # Scalars
    "BUILTIN_SCALARS",
    "COMMON_SCALARS",
    "ScalarMapping",
    "ScalarRegistry",
]

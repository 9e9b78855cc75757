"""Exceptions raised while generating models from a GraphQL schema.

Generation never produces partial output: every failure surfaces as one of
the exceptions below, naming the offending type, field or scalar.
"""


class GenerationError(Exception):
    """Base class for all generation failures."""


class ConfigurationError(GenerationError):
    """The caller's configuration cannot describe the schema."""


class UnknownScalarError(ConfigurationError):
    """A scalar is missing from both the overrides and the built-in table."""

    def __init__(self, scalar_name: str):
        super().__init__(
            f"Unknown scalar type '{scalar_name}'. "
            "Please provide a target type for this type."
        )
        self.scalar_name = scalar_name


class InvariantViolation(GenerationError):
    """The schema model reached a state the generator cannot handle."""


class TypeDepthExceededError(InvariantViolation):
    """A wrapper type chain was truncated by the introspection query."""

    def __init__(self, depth: int, context: str | None = None):
        message = (
            f"Type reference nests LIST/NON_NULL wrappers deeper than the "
            f"{depth} levels captured by the introspection query"
        )
        if context:
            message = f"{message} ({context})"
        super().__init__(message)
        self.depth = depth
        self.context = context


class SchemaDataError(GenerationError):
    """The introspection document is malformed or self-inconsistent."""


class GeneratedCodeError(GenerationError):
    """The assembled module is not valid Python."""

"""Resolution of schema type references to Python type expressions."""

from .errors import InvariantViolation, TypeDepthExceededError
from .introspection import TYPE_REF_DEPTH
from .ir import SchemaType, TypeKind
from .scalars import ScalarRegistry

# Prefix for interface and union classes, so a concrete type sharing the
# base name never collides with the polymorphic one.
POLYMORPHIC_PREFIX = "I"


class TypeNameResolver:
    """Resolves type references to the names used in generated annotations.

    Nullability is never part of a resolved name: NON_NULL is transparent and
    every generated field is optional anyway. Lists become ``List[...]``.
    """

    def __init__(self, scalars: ScalarRegistry, depth: int = TYPE_REF_DEPTH):
        self.scalars = scalars
        self.depth = depth

    def resolve(self, type_ref: SchemaType) -> str:
        """Resolve a possibly wrapped type reference."""
        if type_ref.kind is TypeKind.NON_NULL:
            return self.resolve(self._wrapped(type_ref))
        if type_ref.kind is TypeKind.LIST:
            return f"List[{self.resolve(self._wrapped(type_ref))}]"
        return self.class_name(type_ref)

    def class_name(self, schema_type: SchemaType) -> str:
        """Name of the Python type for a named (unwrapped) schema type."""
        if schema_type.kind.is_wrapper:
            raise InvariantViolation(f"Expected a named type, got {schema_type.kind.value}")
        if schema_type.name is None:
            raise InvariantViolation(f"{schema_type.kind.value} type reference has no name")

        if schema_type.kind is TypeKind.SCALAR:
            return self.scalars.resolve(schema_type.name).python_type
        if schema_type.kind.is_polymorphic:
            return POLYMORPHIC_PREFIX + schema_type.name
        return schema_type.name

    def unwrap(self, type_ref: SchemaType) -> SchemaType:
        """Strip every LIST and NON_NULL layer, returning the named leaf."""
        while type_ref.kind.is_wrapper:
            type_ref = self._wrapped(type_ref)
        return type_ref

    def _wrapped(self, wrapper: SchemaType) -> SchemaType:
        # The query stops describing ofType after `depth` levels; the last
        # level of a deeper chain arrives as a wrapper with nothing inside.
        if wrapper.of_type is None:
            raise TypeDepthExceededError(self.depth)
        return wrapper.of_type

"""Schema model decoded from a GraphQL introspection response.

These dataclasses mirror the ``__Type``, ``__Field`` and ``__EnumValue``
shapes requested by the introspection query, keeping only what the
generator needs. Instances are immutable: one snapshot per generation run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TypeKind(Enum):
    """The ``__TypeKind`` of a schema type.

    ``UNKNOWN`` stands in for kinds this generator does not know about, so
    that they fail loudly at dispatch instead of at decode time.
    """
    UNKNOWN = "UNKNOWN"
    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    INPUT_OBJECT = "INPUT_OBJECT"
    LIST = "LIST"
    NON_NULL = "NON_NULL"

    @classmethod
    def parse(cls, value: str | None) -> "TypeKind":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_wrapper(self) -> bool:
        return self in (TypeKind.LIST, TypeKind.NON_NULL)

    @property
    def is_polymorphic(self) -> bool:
        return self in (TypeKind.INTERFACE, TypeKind.UNION)


@dataclass(frozen=True)
class SchemaEnumValue:
    """A single value of a GraphQL enum."""
    name: str
    description: str | None = None
    is_deprecated: bool = False
    deprecation_reason: str | None = None


@dataclass(frozen=True)
class SchemaField:
    """A field of an object or interface type."""
    name: str
    type: "SchemaType"
    description: str | None = None
    is_deprecated: bool = False
    deprecation_reason: str | None = None


@dataclass(frozen=True)
class SchemaType:
    """A schema type or a type reference.

    Wrapper kinds (LIST, NON_NULL) carry no name and point at the wrapped
    type through ``of_type``. Named types leave ``of_type`` empty.
    """
    kind: TypeKind
    name: str | None = None
    description: str | None = None
    # LIST and NON_NULL only
    of_type: Optional["SchemaType"] = None
    # ENUM only
    enum_values: tuple[SchemaEnumValue, ...] = field(default_factory=tuple)
    # OBJECT and INTERFACE only
    fields: tuple[SchemaField, ...] = field(default_factory=tuple)
    interfaces: tuple["SchemaType", ...] = field(default_factory=tuple)
    # INTERFACE and UNION only
    possible_types: tuple["SchemaType", ...] = field(default_factory=tuple)

    def get_field(self, name: str) -> SchemaField | None:
        """Look up a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def field_names(self) -> set[str]:
        return {f.name for f in self.fields}

"""Lookup tables over the flat list of schema types."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from .ir import SchemaType, TypeKind


@dataclass(frozen=True)
class TypeIndex:
    """Read-only lookups built once per generation run.

    Attributes:
        types: Schema types in source order
        by_name: Named types by name
        unions_by_member: Object type name -> unions listing it as a possible type
    """
    types: tuple[SchemaType, ...]
    by_name: Mapping[str, SchemaType]
    unions_by_member: Mapping[str, tuple[SchemaType, ...]]

    @classmethod
    def build(cls, types: Iterable[SchemaType]) -> "TypeIndex":
        types = tuple(types)
        by_name = {t.name: t for t in types if t.name is not None}

        unions_by_member: dict[str, list[SchemaType]] = {}
        for union in types:
            if union.kind is not TypeKind.UNION:
                continue
            for member in union.possible_types:
                if member.name is None:
                    continue
                unions = unions_by_member.setdefault(member.name, [])
                # a union may list the same member twice
                if not unions or unions[-1] is not union:
                    unions.append(union)

        return cls(
            types=types,
            by_name=MappingProxyType(by_name),
            unions_by_member=MappingProxyType(
                {name: tuple(unions) for name, unions in unions_by_member.items()}
            ),
        )

    def get(self, name: str | None) -> SchemaType | None:
        """Look up a named type, or None if the schema does not define it."""
        if name is None:
            return None
        return self.by_name.get(name)

    def unions_of(self, object_name: str | None) -> tuple[SchemaType, ...]:
        """Unions listing the object type as a possible type, in source order."""
        if object_name is None:
            return ()
        return self.unions_by_member.get(object_name, ())

    def known_possible_types(self, schema_type: SchemaType) -> list[SchemaType]:
        """Possible types of an interface or union, minus dangling and duplicate names.

        Returns the index's own definitions, which carry full field lists.
        """
        seen: set[str] = set()
        result = []
        for ref in schema_type.possible_types:
            if ref.name is None or ref.name in seen:
                continue
            definition = self.by_name.get(ref.name)
            if definition is None:
                continue
            seen.add(ref.name)
            result.append(definition)
        return result

    def parent_interfaces(self, schema_type: SchemaType) -> list[SchemaType]:
        """Declared interfaces of a type, preferring the index's full definitions."""
        return [self.by_name.get(ref.name, ref) for ref in schema_type.interfaces]

    def ancestor_names(self, schema_type: SchemaType) -> set[str]:
        """Names of every interface reachable through ``interfaces``, transitively."""
        seen: set[str] = set()
        pending = list(schema_type.interfaces)
        while pending:
            ref = pending.pop()
            if ref.name is None or ref.name in seen:
                continue
            seen.add(ref.name)
            pending.extend(self.by_name.get(ref.name, ref).interfaces)
        return seen

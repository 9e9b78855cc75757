"""Scalar type mappings for generated models.

Maps GraphQL scalar names to the Python type used in generated annotations,
together with the import that type needs.

Example usage:
    from gql_modelgen.core.scalars import ScalarMapping, ScalarRegistry

    registry = ScalarRegistry()
    registry.register("DateTime", "datetime.datetime")
    registry.register("Money", ScalarMapping("Decimal", "from decimal import Decimal"))

Overrides are consulted before the built-in table, so a registry can also
remap ``ID`` or ``Int``. Scalars found in neither are a configuration error.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from .errors import ConfigurationError, UnknownScalarError


@dataclass(frozen=True)
class ScalarMapping:
    """The Python side of a scalar.

    Attributes:
        python_type: The type expression used in annotations (e.g., "datetime")
        import_statement: The import needed for it (e.g., "from datetime import datetime")
    """
    python_type: str
    import_statement: str | None = None

    @classmethod
    def parse(cls, spec: str) -> "ScalarMapping":
        """Build a mapping from ``"Type"`` or ``"package.module.Type"``.

        A dotted spec imports the last component from its module:
        ``"datetime.datetime"`` becomes ``datetime`` with
        ``from datetime import datetime``.
        """
        spec = spec.strip()
        if not spec:
            raise ConfigurationError("Scalar target type must not be empty")
        if "." not in spec or "[" in spec:
            return cls(python_type=spec)
        module, _, name = spec.rpartition(".")
        return cls(python_type=name, import_statement=f"from {module} import {name}")


ScalarSpec = Union[str, ScalarMapping]

BUILTIN_SCALARS: Mapping[str, ScalarMapping] = MappingProxyType({
    "String": ScalarMapping("str"),
    "Int": ScalarMapping("int"),
    "Float": ScalarMapping("float"),
    "Boolean": ScalarMapping("bool"),
    "ID": ScalarMapping("str"),
})

# Frequently seen custom scalars, opt-in through ScalarRegistry.with_common_scalars()
COMMON_SCALARS: Mapping[str, ScalarMapping] = MappingProxyType({
    "DateTime": ScalarMapping("datetime", "from datetime import datetime"),
    "Date": ScalarMapping("date", "from datetime import date"),
    "UUID": ScalarMapping("UUID", "from uuid import UUID"),
    "Decimal": ScalarMapping("Decimal", "from decimal import Decimal"),
    "JSON": ScalarMapping("Any"),
    "JSONObject": ScalarMapping("Dict[str, Any]"),
})


class ScalarRegistry:
    """Registry of scalar overrides.

    Example:
        registry = ScalarRegistry({"DateTime": "datetime.datetime"})

        registry.resolve("DateTime").python_type  # "datetime"
        registry.resolve("String").python_type    # "str", from the built-in table
    """

    def __init__(
        self,
        overrides: Mapping[str, ScalarSpec] | None = None,
        builtins: Mapping[str, ScalarMapping] = BUILTIN_SCALARS,
    ):
        self._builtins = builtins
        self._mappings: dict[str, ScalarMapping] = {}
        for scalar_name, spec in (overrides or {}).items():
            self.register(scalar_name, spec)

    @classmethod
    def with_common_scalars(
        cls, overrides: Mapping[str, ScalarSpec] | None = None
    ) -> "ScalarRegistry":
        """Create a registry preloaded with COMMON_SCALARS, then ``overrides``."""
        registry = cls(COMMON_SCALARS)
        for scalar_name, spec in (overrides or {}).items():
            registry.register(scalar_name, spec)
        return registry

    @classmethod
    def coerce(
        cls, scalars: "ScalarRegistry | Mapping[str, ScalarSpec] | None"
    ) -> "ScalarRegistry":
        """Accept a registry, a plain mapping, or nothing."""
        if isinstance(scalars, ScalarRegistry):
            return scalars
        return cls(scalars)

    def register(self, scalar_name: str, spec: ScalarSpec):
        """Register a mapping for a scalar type."""
        if isinstance(spec, str):
            spec = ScalarMapping.parse(spec)
        self._mappings[scalar_name] = spec

    def get(self, scalar_name: str) -> ScalarMapping | None:
        """Get the override for a scalar type, or None if not registered."""
        return self._mappings.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        """Check if an override is registered for a scalar type."""
        return scalar_name in self._mappings

    def resolve(self, scalar_name: str) -> ScalarMapping:
        """Resolve a scalar through the overrides, then the built-in table."""
        mapping = self.get(scalar_name) or self._builtins.get(scalar_name)
        if mapping is None:
            raise UnknownScalarError(scalar_name)
        return mapping

    def names(self) -> list[str]:
        """Every scalar this registry resolves: overrides first, then unshadowed built-ins."""
        return list(self._mappings) + [name for name in self._builtins if not self.has(name)]

    def get_imports(self, scalar_names) -> list[str]:
        """Get the sorted, distinct imports needed by the given scalars."""
        imports = set()
        for scalar_name in scalar_names:
            mapping = self.resolve(scalar_name)
            if mapping.import_statement:
                imports.add(mapping.import_statement)
        return sorted(imports)

    def mappings(self) -> list[ScalarMapping]:
        """All registered overrides, in registration order."""
        return list(self._mappings.values())

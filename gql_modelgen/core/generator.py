"""Declaration generator for GraphQL schema types.

Produces one Python declaration per schema type:

- ENUM -> ``class Name(GraphQLEnum)``
- OBJECT -> ``class Name(<interfaces and unions>)`` with read-write fields
- INTERFACE -> ``class IName(<parents>)`` with read-only fields and downcast helpers
- UNION -> ``class IName(GraphQLPolymorphic)`` with the fields common to every member

The base classes referenced here (GraphQLModel, GraphQLPolymorphic,
GraphQLEnum and the pagination shapes) live in the module preamble rendered
by the emitter.
"""

import json
import logging
import re
from dataclasses import dataclass, field

from pydantic import BaseModel

from .errors import (
    ConfigurationError,
    InvariantViolation,
    SchemaDataError,
    TypeDepthExceededError,
)
from .index import TypeIndex
from .ir import SchemaEnumValue, SchemaField, SchemaType, TypeKind
from .resolver import TypeNameResolver
from .scalars import ScalarRegistry

logger = logging.getLogger(__name__)

INDENT = "    "

CONNECTION_SUFFIX = "Connection"
EDGE_SUFFIX = "Edge"

# Names bound by the module template and its preamble
PREAMBLE_NAMES = frozenset({
    "annotations", "ABC", "abstractmethod", "Enum",
    "Any", "ClassVar", "Dict", "Generic", "List", "Optional", "TypeVar",
    "BaseModel", "ConfigDict", "Field", "model_validator",
    "TNode", "TEdge", "_resolve_model",
    "GraphQLModel", "GraphQLPolymorphic", "GraphQLEnum",
    "EdgeShape", "PagedShape", "NodesConnection", "EdgesConnection", "NodesAndEdgesConnection",
})

# Kinds that become a class of the generated module
DECLARED_KINDS = (TypeKind.ENUM, TypeKind.OBJECT, TypeKind.INTERFACE, TypeKind.UNION)


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str) -> str:
    """Make text safe for a single-line Python comment."""
    if not text:
        return ""
    text = text.replace("\n", " ").replace("\r", "")
    text = re.sub(r"\s+", " ", text)
    if len(text) > 120:
        text = text[:117] + "..."
    return text.strip()


def py_string(text: str) -> str:
    """Render text as a double-quoted Python string literal."""
    return json.dumps(text, ensure_ascii=False)


# Python reserved keywords that cannot be used as attribute names
PYTHON_KEYWORDS = {
    'False', 'None', 'True', 'and', 'as', 'assert', 'async', 'await',
    'break', 'class', 'continue', 'def', 'del', 'elif', 'else', 'except',
    'finally', 'for', 'from', 'global', 'if', 'import', 'in', 'is',
    'lambda', 'nonlocal', 'not', 'or', 'pass', 'raise', 'return', 'try',
    'while', 'with', 'yield'
}

# Names a field must not take: BaseModel's API, the preamble's own members,
# and the typing names used in generated annotations.
RESERVED_FIELD_NAMES = (
    {name for name in dir(BaseModel) if not name.startswith("_")}
    | {"typename__", "page_info", "page_nodes", "page_edges", "edge_cursor", "edge_node"}
    | {"Any", "ClassVar", "Dict", "Field", "List", "Optional"}
)


# Enum attributes a member must not shadow
RESERVED_MEMBER_NAMES = {"name", "value", "mro", "deprecation_reason"}


def safe_member_name(name: str) -> str:
    """Make an enum member name safe for Python by suffixing keywords with underscore."""
    if name.startswith("_"):
        # Enum treats _sunder_ and __private names as non-members
        return f"{name.lstrip('_') or 'VALUE'}_"
    if name in PYTHON_KEYWORDS or name in RESERVED_MEMBER_NAMES:
        return f"{name}_"
    return name


@dataclass(frozen=True)
class GenerationContext:
    """Read-only state shared by every declaration of one run."""
    index: TypeIndex
    scalars: ScalarRegistry
    resolver: TypeNameResolver

    @classmethod
    def create(cls, index: TypeIndex, scalars: ScalarRegistry) -> "GenerationContext":
        return cls(index=index, scalars=scalars, resolver=TypeNameResolver(scalars))


@dataclass
class Declaration:
    """Source of one generated class, plus what the module needs around it."""
    name: str
    source: str
    is_model: bool = True
    # Classes from this module that must be defined first (base classes)
    depends_on: list[str] = field(default_factory=list)
    # GraphQL scalar names referenced by fields, for imports
    scalars: set[str] = field(default_factory=set)


@dataclass
class _Pagination:
    base: str
    methods: list[list[str]]


class DeclarationGenerator:
    """Generates Python declarations for schema types."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.index = context.index
        self.resolver = context.resolver
        self._reserved = (
            RESERVED_FIELD_NAMES
            | PREAMBLE_NAMES
            | self._scalar_identifiers(context.scalars)
            | self._class_names()
        )
        self._dispatch = {
            TypeKind.SCALAR: self._skip,
            TypeKind.INPUT_OBJECT: self._skip,
            TypeKind.ENUM: self.generate_enum,
            TypeKind.OBJECT: self.generate_object,
            TypeKind.INTERFACE: self.generate_interface,
            TypeKind.UNION: self.generate_union,
        }

    def generate(self, schema_type: SchemaType) -> Declaration | None:
        """Generate the declaration for a schema type, or None for kinds without one."""
        handler = self._dispatch.get(schema_type.kind)
        if handler is None:
            raise InvariantViolation(
                f"Unexpected type kind {schema_type.kind.value} for type '{schema_type.name}'"
            )
        return handler(schema_type)

    def _skip(self, schema_type: SchemaType) -> None:
        return None

    # -------------------------------------------------------------------------
    # Enums
    # -------------------------------------------------------------------------

    def generate_enum(self, schema_type: SchemaType) -> Declaration:
        lines = [f"class {schema_type.name}(GraphQLEnum):"]
        body = self._docstring(schema_type.description)

        deprecated: dict[str, str] = {}
        members = []
        for value in schema_type.enum_values:
            members.extend(self._comment_lines(value.description))
            member = f"{safe_member_name(value.name)} = {py_string(value.name)}"
            if value.is_deprecated:
                reason = self._deprecation_reason(schema_type, value)
                deprecated[value.name] = reason
                member += f"  # deprecated: {safe_comment(reason)}"
            members.append(member)

        if members:
            body.extend([""] if body else [])
            body.extend(members)
        if deprecated:
            entries = ", ".join(f"{py_string(k)}: {py_string(v)}" for k, v in deprecated.items())
            body.extend(["", f"__deprecated_members__ = {{{entries}}}"])

        lines.extend(self._indent(body or ["pass"]))
        return Declaration(name=schema_type.name, source="\n".join(lines), is_model=False)

    # -------------------------------------------------------------------------
    # Objects
    # -------------------------------------------------------------------------

    def generate_object(self, schema_type: SchemaType) -> Declaration:
        class_name = self.resolver.class_name(schema_type)
        polymorphic = self._prune_ancestors(
            list(schema_type.interfaces) + list(self.index.unions_of(schema_type.name))
        )
        bases = [self.resolver.class_name(t) for t in polymorphic] or ["GraphQLModel"]

        pagination = self._pagination(schema_type)
        if pagination is not None:
            bases.append(pagination.base)

        body = self._docstring(schema_type.description)
        scalars: set[str] = set()
        body.extend(self._field_block(schema_type, schema_type.fields, scalars, read_only=False))
        if pagination is not None:
            for method in pagination.methods:
                body.extend([""] + method)

        return Declaration(
            name=class_name,
            source=self._class(class_name, bases, body),
            depends_on=[self.resolver.class_name(t) for t in polymorphic],
            scalars=scalars,
        )

    def _pagination(self, schema_type: SchemaType) -> _Pagination | None:
        """Infer the pagination shape from the Connection/Edge naming convention."""
        if schema_type.name.endswith(CONNECTION_SUFFIX):
            return self._connection(schema_type)
        if schema_type.name.endswith(EDGE_SUFFIX):
            return self._edge(schema_type)
        return None

    def _connection(self, schema_type: SchemaType) -> _Pagination | None:
        edges = schema_type.get_field("edges")
        nodes = schema_type.get_field("nodes")
        methods = []

        if edges is not None:
            edge_type = self.index.get(self._unwrap(schema_type, edges).name)
            node_field = edge_type.get_field("node") if edge_type is not None else None
            if node_field is not None:
                edge_name = self.resolver.class_name(edge_type)
                node_name = self.resolver.class_name(self._unwrap(edge_type, node_field))
                if nodes is not None:
                    base = f"NodesAndEdgesConnection[{py_string(edge_name)}, {py_string(node_name)}]"
                    methods.append(self._page_nodes_method(nodes, node_name))
                else:
                    base = f"EdgesConnection[{py_string(edge_name)}, {py_string(node_name)}]"
                methods.append(self._forwarder(
                    "page_edges", f"List[Optional[{edge_name}]]",
                    f"list(self.{self._attribute_name(edges.name)} or [])",
                ))
                methods.append(self._page_info_method(schema_type))
                return _Pagination(base=base, methods=methods)
            logger.debug("%s: edge type has no 'node' field, skipping edge access", schema_type.name)

        if nodes is not None:
            node_name = self.resolver.class_name(self._unwrap(schema_type, nodes))
            return _Pagination(
                base=f"NodesConnection[{py_string(node_name)}]",
                methods=[self._page_nodes_method(nodes, node_name), self._page_info_method(schema_type)],
            )

        logger.debug("%s: no 'edges' or 'nodes' field, not a paginated connection", schema_type.name)
        return None

    def _edge(self, schema_type: SchemaType) -> _Pagination | None:
        node = schema_type.get_field("node")
        if node is None:
            logger.debug("%s: no 'node' field, not a pagination edge", schema_type.name)
            return None

        node_name = self.resolver.class_name(self._unwrap(schema_type, node))
        cursor = schema_type.get_field("cursor")
        if cursor is not None:
            cursor_method = self._forwarder(
                "edge_cursor", f"Optional[{self._field_type(schema_type, cursor)}]",
                f"self.{self._attribute_name(cursor.name)}",
            )
        else:
            cursor_method = self._forwarder("edge_cursor", "Optional[str]", "None")

        return _Pagination(
            base=f"EdgeShape[{py_string(node_name)}]",
            methods=[
                cursor_method,
                self._forwarder(
                    "edge_node", f"Optional[{node_name}]", f"self.{self._attribute_name(node.name)}"
                ),
            ],
        )

    def _page_nodes_method(self, nodes: SchemaField, node_name: str) -> list[str]:
        return self._forwarder(
            "page_nodes", f"List[Optional[{node_name}]]",
            f"list(self.{self._attribute_name(nodes.name)} or [])",
        )

    def _page_info_method(self, schema_type: SchemaType) -> list[str]:
        page_info = schema_type.get_field("pageInfo")
        if page_info is None:
            return self._forwarder("page_info", "Any", "None")
        return self._forwarder(
            "page_info", f"Optional[{self._field_type(schema_type, page_info)}]",
            f"self.{self._attribute_name(page_info.name)}",
        )

    @staticmethod
    def _forwarder(name: str, return_type: str, expression: str) -> list[str]:
        return [
            f"def {name}(self) -> {return_type}:",
            f"{INDENT}return {expression}",
        ]

    # -------------------------------------------------------------------------
    # Interfaces and unions
    # -------------------------------------------------------------------------

    def generate_interface(self, schema_type: SchemaType) -> Declaration:
        parents = self._prune_ancestors(list(schema_type.interfaces))
        bases = [self.resolver.class_name(p) for p in parents] or ["GraphQLPolymorphic"]
        possible_types = self.index.known_possible_types(schema_type)

        class_name = self.resolver.class_name(schema_type)
        body = self._docstring(schema_type.description)
        body.extend(self._derived_types(possible_types))

        # Fields already declared by a parent interface are inherited.
        inherited = set()
        for parent in self.index.parent_interfaces(schema_type):
            inherited |= parent.field_names
        own_fields = [f for f in schema_type.fields if f.name not in inherited]

        scalars: set[str] = set()
        body.extend(self._field_block(schema_type, own_fields, scalars, read_only=True))

        # Downcast helpers are declared once, on the root of the hierarchy.
        if not schema_type.interfaces:
            for t in possible_types:
                body.extend([""] + self._downcast(t))

        return Declaration(
            name=class_name,
            source=self._class(class_name, bases, body),
            depends_on=[b for b in bases if b != "GraphQLPolymorphic"],
            scalars=scalars,
        )

    def generate_union(self, schema_type: SchemaType) -> Declaration:
        members = self.index.known_possible_types(schema_type)
        if not members:
            raise ConfigurationError(
                f"Union '{schema_type.name}' has no known possible types; "
                "its common fields are undefined"
            )

        class_name = self.resolver.class_name(schema_type)
        body = self._docstring(schema_type.description)
        body.extend(self._derived_types(members))

        scalars: set[str] = set()
        body.extend(self._field_block(schema_type, self.common_fields(members), scalars, read_only=True))
        for t in members:
            body.extend([""] + self._downcast(t))

        return Declaration(
            name=class_name,
            source=self._class(class_name, ["GraphQLPolymorphic"], body),
            scalars=scalars,
        )

    def common_fields(self, members: list[SchemaType]) -> list[SchemaField]:
        """Fields of the first member whose (resolved type, name) every member shares."""
        first, rest = members[0], members[1:]
        shared = [(self._field_type(first, f), f.name) for f in first.fields]
        for member in rest:
            keys = {(self._field_type(member, f), f.name) for f in member.fields}
            shared = [key for key in shared if key in keys]

        names = {name for _, name in shared}
        return [f for f in first.fields if f.name in names]

    def _derived_types(self, possible_types: list[SchemaType]) -> list[str]:
        if not possible_types:
            return []
        entries = ", ".join(
            f"{py_string(t.name)}: {py_string(self.resolver.class_name(t))}"
            for t in possible_types
        )
        return ["", f"__derived_types__ = {{{entries}}}"]

    def _downcast(self, schema_type: SchemaType) -> list[str]:
        type_name = self.resolver.class_name(schema_type)
        return self._forwarder(
            f"as_{snake_case(type_name)}", f"Optional[{type_name}]",
            f"self if isinstance(self, {type_name}) else None",
        )

    def _prune_ancestors(self, refs: list[SchemaType]) -> list[SchemaType]:
        """Drop duplicates and types another listed interface already inherits.

        Python cannot linearize ``class C(A, B)`` when B is a base of A, and
        membership in B is inherited through A anyway.
        """
        inherited: set[str] = set()
        for ref in refs:
            definition = self.index.get(ref.name)
            if definition is not None and definition.kind is TypeKind.INTERFACE:
                inherited |= self.index.ancestor_names(definition)

        result = []
        seen: set[str] = set()
        for ref in refs:
            if ref.name in inherited or ref.name in seen:
                continue
            seen.add(ref.name)
            result.append(ref)
        return result

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    def _field_block(
        self,
        owner: SchemaType,
        fields: list[SchemaField] | tuple[SchemaField, ...],
        scalars: set[str],
        read_only: bool,
    ) -> list[str]:
        lines = [self._field(owner, f, scalars, read_only) for f in fields]
        return [""] + lines if lines else []

    def _field(self, owner: SchemaType, f: SchemaField, scalars: set[str], read_only: bool) -> str:
        type_name = self._field_type(owner, f)
        leaf = self._unwrap(owner, f)
        if leaf.kind is TypeKind.SCALAR:
            scalars.add(leaf.name)

        attribute = self._attribute_name(f.name)
        args = ["default=None"]
        if attribute != f.name:
            args.append(f"alias={py_string(f.name)}")
        if f.description:
            args.append(f"description={py_string(f.description.strip())}")
        if f.is_deprecated:
            args.append(f"deprecated={py_string(self._deprecation_reason(owner, f))}")
        if read_only:
            args.append("frozen=True")

        # Every field is optional: NON_NULL only shapes the resolved type name.
        return f"{attribute}: Optional[{type_name}] = Field({', '.join(args)})"

    def _field_type(self, owner: SchemaType, f: SchemaField) -> str:
        try:
            return self.resolver.resolve(f.type)
        except TypeDepthExceededError as e:
            raise TypeDepthExceededError(e.depth, f"field '{owner.name}.{f.name}'") from e

    def _unwrap(self, owner: SchemaType, f: SchemaField) -> SchemaType:
        try:
            return self.resolver.unwrap(f.type)
        except TypeDepthExceededError as e:
            raise TypeDepthExceededError(e.depth, f"field '{owner.name}.{f.name}'") from e

    def _attribute_name(self, name: str) -> str:
        """Python attribute for a GraphQL field; renamed ones keep the wire name as alias."""
        if name.startswith("_"):
            return f"{name.lstrip('_') or 'field'}_"
        if name in PYTHON_KEYWORDS or name in self._reserved:
            return f"{name}_"
        return name

    # A field named like a type used in the module's annotations shadows that
    # type inside the class body, and Pydantic then sees its FieldInfo instead.

    @staticmethod
    def _scalar_identifiers(scalars: ScalarRegistry) -> set[str]:
        names = set()
        for scalar_name in scalars.names():
            names.update(re.findall(r"[A-Za-z_]\w*", scalars.resolve(scalar_name).python_type))
        return names

    def _class_names(self) -> set[str]:
        return {
            self.resolver.class_name(t)
            for t in self.index.types
            if t.kind in DECLARED_KINDS and t.name is not None
        }

    @staticmethod
    def _deprecation_reason(owner: SchemaType, member: SchemaField | SchemaEnumValue) -> str:
        if member.deprecation_reason is None:
            raise SchemaDataError(
                f"'{owner.name}.{member.name}' is deprecated but has no deprecation reason"
            )
        return member.deprecation_reason.strip()

    # -------------------------------------------------------------------------
    # Text helpers
    # -------------------------------------------------------------------------

    def _class(self, class_name: str, bases: list[str], body: list[str]) -> str:
        # Drop the blank line that separates sections when nothing precedes it
        while body and body[0] == "":
            body = body[1:]
        lines = [f"class {class_name}({', '.join(bases)}):"]
        lines.extend(self._indent(body or ["pass"]))
        return "\n".join(lines)

    @staticmethod
    def _indent(lines: list[str]) -> list[str]:
        return [f"{INDENT}{line}" if line else "" for line in lines]

    @staticmethod
    def _docstring(description: str | None) -> list[str]:
        text = safe_docstring((description or "").strip())
        if not text:
            return []
        lines = text.splitlines()
        if len(lines) == 1:
            return [f'"""{lines[0]}"""']
        return [f'"""{lines[0]}'] + lines[1:] + ['"""']

    @staticmethod
    def _comment_lines(description: str | None) -> list[str]:
        if not description or not description.strip():
            return []
        return [f"#: {line}".rstrip() for line in description.strip().splitlines()]

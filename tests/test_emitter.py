"""Tests for module emission, end to end."""

import ast
import asyncio

import pytest
from pydantic import ValidationError

from gql_modelgen.core.emitter import (
    ModelEmitter,
    generate_types,
    generate_types_async,
    order_declarations,
)
from gql_modelgen.core.errors import (
    ConfigurationError,
    GeneratedCodeError,
    InvariantViolation,
    SchemaDataError,
    TypeDepthExceededError,
)
from gql_modelgen.core.generator import Declaration
from gql_modelgen.core.hooks import AddHeaderHook, FilterTypesHook, HookRunner
from gql_modelgen.core.introspection import INTROSPECTION_QUERY, TYPE_REF_DEPTH
from gql_modelgen.core.parser import introspect_sdl
from gql_modelgen.core.scalars import ScalarRegistry

from .schema_builders import (
    document,
    enum,
    enum_type,
    enum_value,
    field,
    interface_type,
    non_null,
    obj,
    object_type,
    scalar,
    scalar_type,
    union_type,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def small_document():
    """Subclasses listed before their bases."""
    return document(
        object_type("Query", [field("pet", obj("Dog")), field("born", scalar("DateTime"))]),
        object_type("Dog", [field("id", non_null(scalar("ID"))), field("mood", enum("Mood"))], ["Animal"]),
        interface_type("Animal", [field("id", non_null(scalar("ID")))], ["Dog"]),
        enum_type("Mood", [enum_value("HAPPY")]),
        scalar_type("DateTime"),
    )


@pytest.fixture
def emitter():
    return ModelEmitter({"DateTime": "datetime.datetime", "Unused": "decimal.Decimal"})


def module_names(code: str) -> list[str]:
    """Names of the top-level classes, in order, after the preamble."""
    names = [n.name for n in ast.parse(code).body if isinstance(n, ast.ClassDef)]
    return names[names.index("NodesAndEdgesConnection") + 1:]


def exported(code: str) -> list[str]:
    for node in ast.parse(code).body:
        if isinstance(node, ast.Assign) and node.targets[0].id == "__all__":
            return ast.literal_eval(node.value)
    return []


def rebuilt(code: str) -> list[str]:
    return [
        node.value.func.value.id
        for node in ast.parse(code).body
        if isinstance(node, ast.Expr) and ast.unparse(node).endswith(".model_rebuild()")
    ]


# =============================================================================
# Module layout
# =============================================================================


class TestModuleLayout:
    """Tests for the assembled module."""

    def test_valid_python(self, emitter, small_document):
        code = emitter.generate_types("shop.models", small_document)
        ast.parse(code)
        assert code.startswith('"""Models for the shop.models GraphQL schema.')
        assert "from __future__ import annotations" in code

    def test_preamble(self, emitter, small_document):
        code = emitter.generate_types("shop.models", small_document)
        for name in ("GraphQLModel", "GraphQLPolymorphic", "GraphQLEnum", "EdgeShape", "PagedShape",
                     "NodesConnection", "EdgesConnection", "NodesAndEdgesConnection"):
            assert f"class {name}(" in code

    def test_bases_before_subclasses(self, emitter, small_document):
        code = emitter.generate_types("shop.models", small_document)
        assert module_names(code) == ["Query", "IAnimal", "Dog", "Mood"]

    def test_exports_and_rebuilds(self, emitter, small_document):
        code = emitter.generate_types("shop.models", small_document)
        assert exported(code) == ["Query", "IAnimal", "Dog", "Mood"]
        # enums are not models
        assert rebuilt(code) == ["Query", "IAnimal", "Dog"]

    def test_scalar_imports_only_for_used_scalars(self, emitter, small_document):
        code = emitter.generate_types("shop.models", small_document)
        assert "from datetime import datetime" in code
        assert "Decimal" not in code

    def test_idempotent(self, emitter, small_document):
        first = emitter.generate_types("shop.models", small_document)
        assert emitter.generate_types("shop.models", small_document) == first

    def test_top_level_schema_document(self, emitter, small_document):
        top_level = small_document["data"]
        assert emitter.generate_types("shop", top_level) == emitter.generate_types("shop", small_document)

    def test_empty_schema(self):
        code = generate_types("empty", None, document())
        assert exported(code) == []
        assert rebuilt(code) == []

    def test_module_function(self, small_document):
        code = generate_types("shop", {"DateTime": "datetime.datetime"}, small_document)
        assert "class Dog(IAnimal):" in code


# =============================================================================
# Errors
# =============================================================================


class TestEmitterErrors:
    """Tests for generation failures."""

    @pytest.mark.parametrize("namespace", ["", "1models", "shop..models", "shop-models", "shop.models."])
    def test_invalid_namespace(self, emitter, small_document, namespace):
        with pytest.raises(ConfigurationError):
            emitter.generate_types(namespace, small_document)

    def test_missing_schema(self, emitter):
        with pytest.raises(SchemaDataError):
            emitter.generate_types("shop", {"data": {}})

    def test_missing_types(self, emitter):
        with pytest.raises(SchemaDataError):
            emitter.generate_types("shop", {"__schema": {}})

    def test_unknown_scalar_aborts(self, small_document):
        with pytest.raises(ConfigurationError, match="DateTime"):
            ModelEmitter().generate_types("shop", small_document)

    def test_class_name_collision(self):
        colliding = document(
            interface_type("Animal", [field("id", scalar("ID"))]),
            object_type("IAnimal", [field("id", scalar("ID"))]),
        )
        with pytest.raises(ConfigurationError, match="IAnimal"):
            ModelEmitter().generate_types("shop", colliding)

    def test_preamble_name_collision(self):
        with pytest.raises(ConfigurationError, match="Field"):
            ModelEmitter().generate_types("shop", document(object_type("Field", [])))

    def test_wrappers_deeper_than_query(self):
        response = introspect_sdl("type Query { grid: [[[String!]!]!]! }")
        with pytest.raises(TypeDepthExceededError, match="Query.grid") as exc_info:
            ModelEmitter().generate_types("grid", response)
        assert exc_info.value.depth == TYPE_REF_DEPTH

    def test_invalid_output_from_hook(self, small_document):
        class Breaker:
            def post_generate(self, filename, content):
                return content + "\ndef broken(:\n"

        hooks = HookRunner()
        hooks.add_post_hook(Breaker())
        emitter = ModelEmitter({"DateTime": "str"}, hooks=hooks)
        with pytest.raises(GeneratedCodeError):
            emitter.generate_types("shop", small_document)


# =============================================================================
# Hooks and templates
# =============================================================================


class TestHooksAndTemplates:
    """Tests for hook wiring and custom templates."""

    def test_post_hook_sees_module_filename(self, small_document):
        seen = []

        class Recorder:
            def post_generate(self, filename, content):
                seen.append(filename)
                return content

        hooks = HookRunner()
        hooks.add_post_hook(Recorder())
        hooks.add_post_hook(AddHeaderHook("# generated"))
        code = ModelEmitter({"DateTime": "str"}, hooks=hooks).generate_types("shop.models", small_document)
        assert seen == ["models.py"]
        assert code.startswith("# generated\n\n")

    def test_pre_hook_filters_types(self, small_document):
        hooks = HookRunner()
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix="Query"))
        code = ModelEmitter(hooks=hooks).generate_types("shop", small_document)
        assert "class Query(" not in code
        assert "datetime" not in code

    def test_custom_template_dir(self, tmp_path, small_document):
        (tmp_path / "module.py.j2").write_text("# {{ namespace }}: {{ exported | join(', ') }}\n")
        emitter = ModelEmitter({"DateTime": "str"}, template_dir=str(tmp_path))
        assert emitter.generate_types("shop", small_document) == "# shop: Query, IAnimal, Dog, Mood\n"


# =============================================================================
# Async path
# =============================================================================


class TestAsyncGeneration:
    """Tests for generation through a query sender."""

    def test_sends_query_once(self, emitter, small_document):
        sent = []

        async def send_query(query):
            sent.append(query)
            return small_document

        code = asyncio.run(emitter.generate_types_async("shop.models", send_query))
        assert sent == [INTROSPECTION_QUERY]
        assert code == emitter.generate_types("shop.models", small_document)

    def test_module_function(self, small_document):
        async def send_query(query):
            return small_document

        code = asyncio.run(generate_types_async("shop", {"DateTime": "str"}, send_query))
        assert "class IAnimal(GraphQLPolymorphic):" in code

    def test_sender_errors_propagate(self, emitter):
        async def send_query(query):
            raise RuntimeError("endpoint down")

        with pytest.raises(RuntimeError, match="endpoint down"):
            asyncio.run(emitter.generate_types_async("shop", send_query))


# =============================================================================
# Declaration ordering
# =============================================================================


class TestOrderDeclarations:
    """Tests for order_declarations."""

    def test_stable_without_dependencies(self):
        declarations = [Declaration(name, "") for name in ("B", "A", "C")]
        assert [d.name for d in order_declarations(declarations)] == ["B", "A", "C"]

    def test_hoists_bases(self):
        declarations = [
            Declaration("Dog", "", depends_on=["IAnimal", "IPet"]),
            Declaration("Cat", ""),
            Declaration("IPet", ""),
            Declaration("IAnimal", "", depends_on=["INode"]),
            Declaration("INode", ""),
        ]
        assert [d.name for d in order_declarations(declarations)] == ["INode", "IAnimal", "IPet", "Dog", "Cat"]

    def test_ignores_unknown_dependencies(self):
        declarations = [Declaration("Dog", "", depends_on=["IMissing"])]
        assert [d.name for d in order_declarations(declarations)] == ["Dog"]

    def test_cycle(self):
        declarations = [Declaration("IA", "", depends_on=["IB"]), Declaration("IB", "", depends_on=["IA"])]
        with pytest.raises(InvariantViolation):
            order_declarations(declarations)


# =============================================================================
# Generated models at runtime
# =============================================================================


class TestGeneratedModels:
    """Imports a generated module and validates payloads with it."""

    @pytest.fixture
    def zoo(self, zoo_document, load_module):
        hooks = HookRunner()
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix="__"))
        registry = ScalarRegistry({"DateTime": "datetime.datetime"})
        code = ModelEmitter(registry, hooks=hooks).generate_types("zoo_models", zoo_document)
        return load_module("zoo_models", code)

    @pytest.fixture
    def query(self, zoo):
        return zoo.Query.model_validate({
            "pets": [
                {"__typename": "Dog", "id": "1", "name": "Rex", "from": "shelter", "born": "2020-01-02T03:04:05"},
                {"__typename": "Cat", "id": "2", "lives": 9, "color": "BLUE"},
            ],
            "favorite": {"__typename": "Cat", "id": "3"},
            "animals": {
                "edges": [{"cursor": "c1", "node": {"__typename": "Dog", "id": "1"}}],
                "nodes": [{"__typename": "Cat", "id": "2"}],
                "pageInfo": {"hasNextPage": False},
            },
        })

    def test_union_dispatch(self, zoo, query):
        dog, cat = query.pets
        assert isinstance(dog, zoo.Dog)
        assert isinstance(cat, zoo.Cat)
        assert isinstance(dog, zoo.IPet)
        assert dog.typename__ == "Dog"

    def test_interface_dispatch(self, zoo, query):
        assert isinstance(query.favorite, zoo.Cat)
        assert isinstance(query.favorite, zoo.IAnimal)
        assert isinstance(query.favorite, zoo.INode)

    def test_downcasts(self, zoo, query):
        dog, cat = query.pets
        assert dog.as_dog() is dog
        assert dog.as_cat() is None
        assert cat.as_cat() is cat

    def test_field_values(self, zoo, query):
        dog, cat = query.pets
        assert dog.from_ == "shelter"
        assert dog.born.year == 2020
        assert cat.lives == 9
        assert cat.color is zoo.Color.BLUE
        assert cat.name is None

    def test_enum_deprecation(self, zoo):
        assert zoo.Color.BLUE.deprecation_reason == "Use GREEN"
        assert zoo.Color.RED.deprecation_reason is None
        assert zoo.Color("RED") is zoo.Color.RED

    def test_connection(self, zoo, query):
        connection = query.animals
        assert isinstance(connection, zoo.NodesAndEdgesConnection)
        (first,) = connection.page_edges()
        assert isinstance(first, zoo.EdgeShape)
        assert first.edge_cursor() == "c1"
        assert isinstance(first.edge_node(), zoo.Dog)
        assert isinstance(connection.page_nodes()[0], zoo.Cat)
        assert connection.page_info().hasNextPage is False

    def test_object_fields_are_writable(self, query):
        dog = query.pets[0]
        dog.name = "Max"
        assert dog.name == "Max"

    def test_interface_fields_are_read_only(self, zoo):
        node = zoo.INode.model_validate({"id": "7"})
        with pytest.raises(ValidationError):
            node.id = "8"

    def test_unknown_typename_falls_back(self, zoo):
        animal = zoo.IAnimal.model_validate({"__typename": "Unicorn", "id": "9", "name": "Sparkle"})
        assert type(animal) is zoo.IAnimal
        assert animal.name == "Sparkle"

    def test_sdl_with_introspection_types(self, zoo_document):
        code = ModelEmitter({"DateTime": "str"}).generate_types("zoo", zoo_document)
        assert "class __Type(GraphQLModel):" in code
        assert "class __TypeKind(GraphQLEnum):" in code

    def test_fields_named_like_classes(self, load_module):
        response = introspect_sdl(
            "enum Color { RED }\n"
            "type Car { Color: Color, GraphQLModel: String, name: String }\n"
            "type Query { car: Car }\n"
        )
        hooks = HookRunner()
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix="__"))
        cars = load_module("cars", ModelEmitter(hooks=hooks).generate_types("cars", response))

        car = cars.Car.model_validate({"Color": "RED", "GraphQLModel": "x", "name": "Herbie"})
        assert car.Color_ is cars.Color.RED
        assert car.GraphQLModel_ == "x"
        assert car.name == "Herbie"
        assert car.model_dump(by_alias=True)["Color"] is cars.Color.RED

"""Tests for the type index."""

import pytest

from gql_modelgen.core.index import TypeIndex
from gql_modelgen.core.parser import parse_introspection

from .schema_builders import (
    document,
    field,
    interface_type,
    object_type,
    scalar,
    union_type,
)


@pytest.fixture
def index():
    types = parse_introspection(document(
        interface_type("Node", [field("id", scalar("ID"))], ["Dog", "Cat"]),
        interface_type("Animal", [field("id", scalar("ID"))], ["Dog", "Cat", "Ghost", "Dog"], ["Node"]),
        object_type("Dog", [field("id", scalar("ID"))], ["Animal", "Node"]),
        object_type("Cat", [field("id", scalar("ID"))], ["Animal", "Node"]),
        union_type("Pet", ["Dog", "Cat", "Dog"]),
        union_type("SearchResult", ["Dog"]),
    ))
    return TypeIndex.build(types)


class TestTypeIndex:
    """Tests for TypeIndex lookups."""

    def test_by_name(self, index):
        assert index.get("Dog").name == "Dog"
        assert index.get("Missing") is None
        assert index.get(None) is None

    def test_keeps_source_order(self, index):
        assert [t.name for t in index.types] == ["Node", "Animal", "Dog", "Cat", "Pet", "SearchResult"]

    def test_unions_of(self, index):
        assert [u.name for u in index.unions_of("Dog")] == ["Pet", "SearchResult"]
        assert [u.name for u in index.unions_of("Cat")] == ["Pet"]
        assert index.unions_of("Node") == ()
        assert index.unions_of(None) == ()

    def test_is_read_only(self, index):
        with pytest.raises(TypeError):
            index.by_name["Extra"] = index.get("Dog")
        with pytest.raises(TypeError):
            index.unions_by_member["Extra"] = ()

    def test_known_possible_types_filters_dangling_and_duplicates(self, index):
        animal = index.get("Animal")
        assert [t.name for t in index.known_possible_types(animal)] == ["Dog", "Cat"]

    def test_known_possible_types_returns_definitions(self, index):
        dog = index.known_possible_types(index.get("Pet"))[0]
        assert dog.field_names == {"id"}
        assert [i.name for i in dog.interfaces] == ["Animal", "Node"]

    def test_parent_interfaces(self, index):
        parents = index.parent_interfaces(index.get("Animal"))
        assert [p.name for p in parents] == ["Node"]
        assert parents[0].field_names == {"id"}

    def test_ancestor_names(self, index):
        assert index.ancestor_names(index.get("Dog")) == {"Animal", "Node"}
        assert index.ancestor_names(index.get("Animal")) == {"Node"}
        assert index.ancestor_names(index.get("Node")) == set()

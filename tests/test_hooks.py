"""Tests for generation hooks."""

import pytest

from gql_modelgen.core.hooks import (
    AddHeaderHook,
    FilterTypesHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
)
from gql_modelgen.core.ir import SchemaType, TypeKind


@pytest.fixture
def sample_types():
    """Schema types in source order."""
    return [
        SchemaType(kind=TypeKind.OBJECT, name="User"),
        SchemaType(kind=TypeKind.OBJECT, name="_Meta"),
        SchemaType(kind=TypeKind.ENUM, name="Status"),
        SchemaType(kind=TypeKind.INPUT_OBJECT, name="CreateUserInput"),
        SchemaType(kind=TypeKind.OBJECT, name="__Schema"),
        SchemaType(kind=TypeKind.OBJECT, name="Product"),
    ]


def names(types):
    return [t.name for t in types]


class TestAddHeaderHook:
    """Tests for AddHeaderHook."""

    def test_adds_header(self):
        hook = AddHeaderHook("# Auto-generated")
        result = hook.post_generate("models.py", "class User:\n    pass")
        assert result.startswith("# Auto-generated\n\n")

    def test_preserves_content(self):
        hook = AddHeaderHook("# Header")
        content = "class User:\n    pass"
        result = hook.post_generate("models.py", content)
        assert content in result

    def test_handles_header_with_newline(self):
        hook = AddHeaderHook("# Header\n")
        result = hook.post_generate("test.py", "code")
        # Should not double-up newlines
        assert result == "# Header\n\ncode"


class TestFilterTypesHook:
    """Tests for FilterTypesHook."""

    def test_exclude_prefix(self, sample_types):
        hook = FilterTypesHook(exclude_prefix="_")
        assert names(hook.pre_generate(sample_types)) == ["User", "Status", "CreateUserInput", "Product"]

    def test_exclude_introspection_types(self, sample_types):
        hook = FilterTypesHook(exclude_prefix="__")
        assert "__Schema" not in names(hook.pre_generate(sample_types))
        assert "_Meta" in names(hook.pre_generate(sample_types))

    def test_exclude_suffix(self, sample_types):
        hook = FilterTypesHook(exclude_suffix="Input")
        assert "CreateUserInput" not in names(hook.pre_generate(sample_types))

    def test_include_prefix(self, sample_types):
        hook = FilterTypesHook(include_prefix="User")
        assert names(hook.pre_generate(sample_types)) == ["User"]

    def test_include_suffix(self, sample_types):
        hook = FilterTypesHook(include_suffix="uct")
        assert names(hook.pre_generate(sample_types)) == ["Product"]

    def test_keeps_unnamed_types(self):
        wrapper = SchemaType(kind=TypeKind.LIST)
        assert FilterTypesHook(include_prefix="X").pre_generate([wrapper]) == [wrapper]

    def test_does_not_mutate_input(self, sample_types):
        before = list(sample_types)
        FilterTypesHook(exclude_prefix="_").pre_generate(sample_types)
        assert sample_types == before


class TestHookRunner:
    """Tests for HookRunner."""

    def test_pre_hooks_run_in_order(self, sample_types):
        runner = HookRunner()
        runner.add_pre_hook(FilterTypesHook(exclude_prefix="_"))
        runner.add_pre_hook(FilterTypesHook(exclude_suffix="Input"))
        assert names(runner.run_pre_hooks(sample_types)) == ["User", "Status", "Product"]

    def test_post_hooks_run_in_order(self):
        runner = HookRunner()
        runner.add_post_hook(AddHeaderHook("# second"))
        runner.add_post_hook(AddHeaderHook("# first"))
        assert runner.run_post_hooks("models.py", "x = 1\n") == "# first\n\n# second\n\nx = 1\n"

    def test_empty_runner(self, sample_types):
        runner = HookRunner()
        assert runner.run_pre_hooks(sample_types) is sample_types
        assert runner.run_post_hooks("models.py", "code") == "code"


class TestProtocols:
    """The built-in hooks satisfy the hook protocols."""

    def test_builtin_hooks(self):
        assert isinstance(FilterTypesHook(), PreGenerateHook)
        assert isinstance(AddHeaderHook("#"), PostGenerateHook)
        assert not isinstance(AddHeaderHook("#"), PreGenerateHook)

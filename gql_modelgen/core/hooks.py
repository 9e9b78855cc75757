"""Generation hooks for customizing code generation.

Pre-generation hooks see the decoded schema types before the type index is
built and may drop or replace them. Post-generation hooks see the assembled
module text; this is where formatting belongs.

Example usage:
    from gql_modelgen.core.hooks import HookRunner, FilterTypesHook

    # Skip the introspection types (__Schema, __Type, ...)
    runner = HookRunner()
    runner.add_pre_hook(FilterTypesHook(exclude_prefix="__"))

    # Format with black
    class FormatWithBlack:
        def post_generate(self, filename, content):
            import black
            return black.format_str(content, mode=black.FileMode())

    runner.add_post_hook(FormatWithBlack())
"""

from typing import Protocol, runtime_checkable

from .ir import SchemaType


@runtime_checkable
class PreGenerateHook(Protocol):
    """Protocol for pre-generation hooks.

    Example:
        class SkipInternal:
            def pre_generate(self, types: list[SchemaType]) -> list[SchemaType]:
                return [t for t in types if not (t.name or "").startswith("Internal")]
    """

    def pre_generate(self, types: list[SchemaType]) -> list[SchemaType]:
        """Called before the type index is built.

        Args:
            types: Schema types in source order

        Returns:
            The (possibly modified) types to generate from
        """
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Protocol for post-generation hooks."""

    def post_generate(self, filename: str, content: str) -> str:
        """Called with the assembled module.

        Args:
            filename: Module file name derived from the namespace (e.g., "models.py")
            content: The generated code

        Returns:
            The (possibly transformed) code
        """
        ...


class AddHeaderHook:
    """Built-in hook to add a header to the generated module.

    Example:
        hook = AddHeaderHook("# Auto-generated - do not edit")
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        """Add a header to the beginning of the file."""
        if not self.header.endswith("\n"):
            header = self.header + "\n\n"
        else:
            header = self.header + "\n"
        return header + content


class FilterTypesHook:
    """Built-in hook to drop schema types by name prefix/suffix.

    Dropping a type that other declarations still reference leaves a
    dangling name in the generated module; the usual use is removing the
    self-contained introspection types.

    Example:
        hook = FilterTypesHook(exclude_prefix="__")
    """

    def __init__(
        self,
        exclude_prefix: str | None = None,
        exclude_suffix: str | None = None,
        include_prefix: str | None = None,
        include_suffix: str | None = None,
    ):
        self.exclude_prefix = exclude_prefix
        self.exclude_suffix = exclude_suffix
        self.include_prefix = include_prefix
        self.include_suffix = include_suffix

    def _should_include(self, name: str) -> bool:
        """Check if a type should be included."""
        if self.exclude_prefix and name.startswith(self.exclude_prefix):
            return False
        if self.exclude_suffix and name.endswith(self.exclude_suffix):
            return False
        if self.include_prefix and not name.startswith(self.include_prefix):
            return False
        if self.include_suffix and not name.endswith(self.include_suffix):
            return False
        return True

    def pre_generate(self, types: list[SchemaType]) -> list[SchemaType]:
        """Filter types, keeping source order."""
        return [t for t in types if t.name is None or self._should_include(t.name)]


class HookRunner:
    """Runs a collection of hooks in order."""

    def __init__(self):
        self.pre_hooks: list[PreGenerateHook] = []
        self.post_hooks: list[PostGenerateHook] = []

    def add_pre_hook(self, hook: PreGenerateHook):
        """Add a pre-generation hook."""
        self.pre_hooks.append(hook)

    def add_post_hook(self, hook: PostGenerateHook):
        """Add a post-generation hook."""
        self.post_hooks.append(hook)

    def run_pre_hooks(self, types: list[SchemaType]) -> list[SchemaType]:
        """Run all pre-generation hooks in order."""
        for hook in self.pre_hooks:
            types = hook.pre_generate(types)
        return types

    def run_post_hooks(self, filename: str, content: str) -> str:
        """Run all post-generation hooks in order."""
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content

"""Emission driver: introspection response in, Python module out.

Renders the module skeleton and the shared base classes with Jinja2
templates and fills it with one declaration per schema type.

Supports custom templates via the template_dir parameter:
    emitter = ModelEmitter(scalars, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
import logging
import re
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .errors import ConfigurationError, GeneratedCodeError, InvariantViolation
from .generator import (
    PREAMBLE_NAMES,
    Declaration,
    DeclarationGenerator,
    GenerationContext,
    py_string,
)
from .hooks import HookRunner
from .index import TypeIndex
from .introspection import INTROSPECTION_QUERY
from .parser import parse_introspection
from .scalars import ScalarRegistry, ScalarSpec

logger = logging.getLogger(__name__)

SendQuery = Callable[[str], Awaitable[Mapping[str, Any]]]

_MODULE_PATH = re.compile(r"^[A-Za-z_]\w*(\.[A-Za-z_]\w*)*$")


def order_declarations(declarations: list[Declaration]) -> list[Declaration]:
    """Order declarations so base classes precede their subclasses.

    Source order is kept otherwise: a base class is hoisted to just before
    the first declaration that needs it.
    """
    by_name = {d.name: d for d in declarations}
    ordered: list[Declaration] = []
    done: set[str] = set()
    visiting: set[str] = set()

    def visit(declaration: Declaration):
        if declaration.name in done:
            return
        if declaration.name in visiting:
            raise InvariantViolation(f"Inheritance cycle through '{declaration.name}'")
        visiting.add(declaration.name)
        for dependency in declaration.depends_on:
            if dependency in by_name:
                visit(by_name[dependency])
        visiting.discard(declaration.name)
        done.add(declaration.name)
        ordered.append(declaration)

    for declaration in declarations:
        visit(declaration)
    return ordered


class ModelEmitter:
    """Generates a module of Pydantic models from an introspection response.

    Example:
        emitter = ModelEmitter({"DateTime": "datetime.datetime"})
        source = emitter.generate_types("shop.models", response)
    """

    def __init__(
        self,
        scalars: ScalarRegistry | Mapping[str, ScalarSpec] | None = None,
        hooks: Optional[HookRunner] = None,
        template_dir: Optional[str] = None,
    ):
        """Initialize the emitter.

        Args:
            scalars: Scalar overrides, consulted before the built-in scalar table
            hooks: Pre/post generation hooks; post hooks act as the formatter
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.
        """
        self.scalars = ScalarRegistry.coerce(scalars)
        self.hooks = hooks or HookRunner()

        # Build template loader - custom templates take precedence
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_modelgen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["py_string"] = py_string

    async def generate_types_async(self, namespace: str, send_query: SendQuery) -> str:
        """Send the introspection query once, then generate from its response."""
        response = await send_query(INTROSPECTION_QUERY)
        return self.generate_types(namespace, response)

    def generate_types(self, namespace: str, response: Mapping[str, Any]) -> str:
        """Generate the module text for an introspection response."""
        if not _MODULE_PATH.match(namespace or ""):
            raise ConfigurationError(f"Invalid module namespace '{namespace}'")

        types = self.hooks.run_pre_hooks(parse_introspection(response))
        context = GenerationContext.create(TypeIndex.build(types), self.scalars)
        generator = DeclarationGenerator(context)

        declarations = []
        for schema_type in types:
            declaration = generator.generate(schema_type)
            if declaration is not None:
                declarations.append(declaration)
        self._check_names(declarations)
        declarations = order_declarations(declarations)
        logger.debug("Generated %d declarations from %d types", len(declarations), len(types))

        used_scalars: set[str] = set()
        for declaration in declarations:
            used_scalars |= declaration.scalars

        content = self.env.get_template("module.py.j2").render(
            namespace=namespace,
            imports=self.scalars.get_imports(sorted(used_scalars)),
            declarations=[d.source for d in declarations],
            exported=[d.name for d in declarations],
            models=[d.name for d in declarations if d.is_model],
        )

        filename = f"{namespace.rpartition('.')[2]}.py"
        content = self.hooks.run_post_hooks(filename, content)

        # Validate Python syntax
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise GeneratedCodeError(f"Generated invalid Python for {namespace}: {e}") from e
        return content

    def _check_names(self, declarations: list[Declaration]):
        taken = set(PREAMBLE_NAMES)
        for mapping in self.scalars.mappings():
            taken.add(mapping.python_type)
        for declaration in declarations:
            if declaration.name in taken:
                raise ConfigurationError(
                    f"Generated class '{declaration.name}' collides with another name in the module"
                )
            taken.add(declaration.name)


def generate_types(
    namespace: str,
    scalars: ScalarRegistry | Mapping[str, ScalarSpec] | None,
    response: Mapping[str, Any],
) -> str:
    """Generate models for ``namespace`` from an introspection response."""
    return ModelEmitter(scalars).generate_types(namespace, response)


async def generate_types_async(
    namespace: str,
    scalars: ScalarRegistry | Mapping[str, ScalarSpec] | None,
    send_query: SendQuery,
) -> str:
    """Fetch the schema with ``send_query`` and generate models for it."""
    return await ModelEmitter(scalars).generate_types_async(namespace, send_query)

"""Command-line interface for gql-modelgen."""

import asyncio
import logging
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path

import click
import httpx

from .core.emitter import ModelEmitter
from .core.errors import ConfigurationError, GenerationError
from .core.executor import GraphQLError, GraphQLExecutor
from .core.hooks import AddHeaderHook, FilterTypesHook, HookRunner
from .core.introspection import INTROSPECTION_QUERY
from .core.parser import SchemaParser
from .core.scalars import ScalarRegistry

ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz")


def extract_archive(archive_path: Path) -> str:
    """Extract archive to temp directory. Returns path to extracted content."""
    temp_dir = tempfile.mkdtemp()
    if archive_path.suffix == ".zip":
        with zipfile.ZipFile(archive_path, "r") as zip_ref:
            zip_ref.extractall(temp_dir)
    elif archive_path.name.endswith((".tar.gz", ".tgz")):
        with tarfile.open(archive_path, "r:gz") as tar_ref:
            tar_ref.extractall(temp_dir, filter="data")
    else:
        shutil.rmtree(temp_dir)
        raise ValueError(f"Unsupported archive format: {archive_path.suffix}")
    return temp_dir


def parse_pairs(values: tuple[str, ...], separator: str, option: str) -> dict[str, str]:
    """Split repeated ``KEY<sep>VALUE`` options into a dict."""
    pairs = {}
    for value in values:
        key, found, target = value.partition(separator)
        if not found or not key.strip() or not target.strip():
            raise click.BadParameter(f"expected KEY{separator}VALUE, got {value!r}", param_hint=option)
        pairs[key.strip()] = target.strip()
    return pairs


@click.group()
@click.version_option(package_name="gql-modelgen")
def main():
    """GraphQL model generator for Python.

    Generate Pydantic models from a GraphQL schema's introspection.
    """
    pass


@main.command()
@click.option(
    "--schema",
    "-s",
    type=click.Path(exists=True),
    help="Introspection JSON, SDL file, directory, or archive (.zip, .tar.gz, .tgz).",
)
@click.option(
    "--url",
    "-u",
    help="GraphQL endpoint to send the introspection query to.",
)
@click.option(
    "--header",
    "-H",
    "headers",
    multiple=True,
    help='Request header for --url, as "Name: value". Repeatable.',
)
@click.option(
    "--timeout",
    default=30.0,
    show_default=True,
    type=float,
    help="Request timeout in seconds for --url.",
)
@click.option(
    "--namespace",
    "-n",
    required=True,
    help="Dotted module name of the generated models (e.g., shop.models).",
)
@click.option(
    "--scalar",
    "scalars",
    multiple=True,
    help="Scalar mapping as NAME=TYPE, e.g. DateTime=datetime.datetime. Repeatable.",
)
@click.option(
    "--common-scalars",
    is_flag=True,
    help="Map DateTime, Date, UUID, Decimal, JSON and JSONObject to standard types.",
)
@click.option(
    "--exclude-prefix",
    help="Skip schema types whose name starts with this prefix (e.g., __).",
)
@click.option(
    "--header-comment",
    help="Comment placed at the top of the generated module.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file for the generated module (default: stdout).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(
    schema: str | None,
    url: str | None,
    headers: tuple[str, ...],
    timeout: float,
    namespace: str,
    scalars: tuple[str, ...],
    common_scalars: bool,
    exclude_prefix: str | None,
    header_comment: str | None,
    output: str | None,
    verbose: bool,
):
    """Generate Pydantic models from a GraphQL schema.

    Examples:

        gql-modelgen generate --schema ./schema.json --namespace shop.models -o models.py

        gql-modelgen generate -s ./schema -n shop.models --exclude-prefix __

        gql-modelgen generate -u https://api.example.com/graphql -H "Authorization: Bearer x" -n api
    """
    if (schema is None) == (url is None):
        raise click.UsageError("Pass exactly one of --schema or --url.")

    if verbose:
        logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
        logging.getLogger("gql_modelgen").setLevel(logging.DEBUG)

    overrides = parse_pairs(scalars, "=", "--scalar")
    request_headers = parse_pairs(headers, ":", "--header")
    registry = (
        ScalarRegistry.with_common_scalars(overrides) if common_scalars else ScalarRegistry(overrides)
    )

    hooks = HookRunner()
    if exclude_prefix:
        hooks.add_pre_hook(FilterTypesHook(exclude_prefix=exclude_prefix))
    if header_comment:
        hooks.add_post_hook(AddHeaderHook(f"# {header_comment}"))

    emitter = ModelEmitter(registry, hooks=hooks)

    try:
        if url is not None:
            click.echo(f"Introspecting {url}...", err=True)
            code = asyncio.run(_generate_from_url(emitter, namespace, url, request_headers, timeout))
        else:
            code = _generate_from_path(emitter, namespace, Path(schema).resolve(), verbose)
    except (GenerationError, GraphQLError, httpx.HTTPError) as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(code, nl=False)
        return

    output_path = Path(output).resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(code, encoding="utf-8")

    num_classes = code.count("\nclass ")
    click.echo(f"Done! Generated {num_classes} classes in {output_path}", err=True)


def _generate_from_path(emitter: ModelEmitter, namespace: str, schema_path: Path, verbose: bool) -> str:
    temp_dir = None
    try:
        # Handle archives
        actual_schema_path = schema_path
        if schema_path.is_file() and schema_path.name.lower().endswith(ARCHIVE_SUFFIXES):
            click.echo(f"Extracting archive {schema_path.name}...", err=True)
            try:
                temp_dir = extract_archive(schema_path)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
            actual_schema_path = Path(temp_dir)
            if verbose:
                click.echo(f"  Extracted to: {temp_dir}", err=True)

        if verbose:
            click.echo(f"Schema: {actual_schema_path}", err=True)

        click.echo("Parsing schema...", err=True)
        document = SchemaParser(str(actual_schema_path)).load_document()

        click.echo("Generating models...", err=True)
        return emitter.generate_types(namespace, document)
    finally:
        # Clean up temp directory
        if temp_dir:
            shutil.rmtree(temp_dir)


async def _generate_from_url(
    emitter: ModelEmitter,
    namespace: str,
    url: str,
    headers: dict[str, str],
    timeout: float,
) -> str:
    async with GraphQLExecutor(url, headers, timeout=timeout) as executor:
        return await emitter.generate_types_async(namespace, executor.send_query)


@main.command()
def query():
    """Print the introspection query sent to GraphQL endpoints."""
    click.echo(INTROSPECTION_QUERY)


if __name__ == "__main__":
    main()

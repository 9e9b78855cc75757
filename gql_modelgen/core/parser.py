"""Introspection response decoding and schema loading.

Turns an introspection response document into the schema model. Schemas
kept on disk are loaded either from a saved introspection response (.json)
or from SDL files, which graphql-core builds and answers the introspection
query for, so both paths go through the same decoding.
"""

import json
import logging
import os
from typing import Any, Mapping

from graphql import GraphQLError, build_schema, graphql_sync

from .errors import SchemaDataError
from .introspection import INTROSPECTION_QUERY
from .ir import SchemaEnumValue, SchemaField, SchemaType, TypeKind

logger = logging.getLogger(__name__)

SDL_EXTENSIONS = (".graphql", ".graphqls", ".gql")
INTROSPECTION_EXTENSIONS = (".json",)


def extract_schema(document: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the ``__schema`` object, found at the top level or under ``data``."""
    if not isinstance(document, Mapping):
        raise SchemaDataError("Introspection response must be a JSON object")

    data = document.get("data")
    root = data if isinstance(data, Mapping) else document

    schema = root.get("__schema")
    if not isinstance(schema, Mapping):
        raise SchemaDataError("Introspection response is missing '__schema'")
    return schema


def parse_introspection(document: Mapping[str, Any]) -> list[SchemaType]:
    """Decode the ``__schema.types`` list of a response, keeping source order."""
    types = extract_schema(document).get("types")
    if not isinstance(types, list):
        raise SchemaDataError("Introspection response is missing '__schema.types'")

    parsed = [parse_type(raw) for raw in types]
    logger.debug("Decoded %d schema types", len(parsed))
    return parsed


def parse_type(raw: Mapping[str, Any]) -> SchemaType:
    """Decode one ``__Type`` object, recursing through nested references."""
    if not isinstance(raw, Mapping):
        raise SchemaDataError(f"Expected a type object, got {type(raw).__name__}")

    of_type = raw.get("ofType")
    return SchemaType(
        kind=TypeKind.parse(raw.get("kind")),
        name=raw.get("name"),
        description=raw.get("description"),
        of_type=parse_type(of_type) if of_type is not None else None,
        enum_values=tuple(_parse_enum_value(v) for v in raw.get("enumValues") or ()),
        fields=tuple(_parse_field(f) for f in raw.get("fields") or ()),
        interfaces=tuple(parse_type(i) for i in raw.get("interfaces") or ()),
        possible_types=tuple(parse_type(t) for t in raw.get("possibleTypes") or ()),
    )


def _parse_field(raw: Mapping[str, Any]) -> SchemaField:
    type_ref = raw.get("type")
    if type_ref is None:
        raise SchemaDataError(f"Field '{raw.get('name')}' has no type")
    return SchemaField(
        name=raw["name"],
        type=parse_type(type_ref),
        description=raw.get("description"),
        is_deprecated=bool(raw.get("isDeprecated")),
        deprecation_reason=raw.get("deprecationReason"),
    )


def _parse_enum_value(raw: Mapping[str, Any]) -> SchemaEnumValue:
    return SchemaEnumValue(
        name=raw["name"],
        description=raw.get("description"),
        is_deprecated=bool(raw.get("isDeprecated")),
        deprecation_reason=raw.get("deprecationReason"),
    )


def introspect_sdl(sdl: str) -> dict[str, Any]:
    """Answer the introspection query for an SDL schema with graphql-core."""
    try:
        schema = build_schema(sdl)
    except GraphQLError as e:
        raise SchemaDataError(f"Invalid GraphQL SDL: {e}") from e

    result = graphql_sync(schema, INTROSPECTION_QUERY)
    if result.errors:
        messages = "; ".join(e.message for e in result.errors)
        raise SchemaDataError(f"Introspection of SDL schema failed: {messages}")
    return {"data": result.data}


class SchemaParser:
    """Loads schema types from a file or directory.

    A ``.json`` file is read as a saved introspection response. Any other
    path is treated as SDL: a single schema file, or a directory whose
    ``.graphql``/``.graphqls``/``.gql`` files are joined into one document.
    """

    def __init__(self, schema_path: str):
        """Initialize a parser with a path to a schema file or directory."""
        self.schema_path = schema_path

    def load_document(self) -> dict[str, Any]:
        """Return the introspection response document for the schema path."""
        if os.path.isfile(self.schema_path) and self.schema_path.endswith(INTROSPECTION_EXTENSIONS):
            with open(self.schema_path, encoding="utf-8") as f:
                try:
                    return json.load(f)
                except json.JSONDecodeError as e:
                    raise SchemaDataError(f"Invalid JSON in {self.schema_path}: {e}") from e

        schema_files = self._collect_schema_files()
        if not schema_files:
            raise SchemaDataError(f"No GraphQL schema files found at {self.schema_path}")

        chunks = []
        for file_path in schema_files:
            logger.debug("Reading SDL from %s", file_path)
            with open(file_path, encoding="utf-8") as f:
                chunks.append(f.read())
        return introspect_sdl("\n".join(chunks))

    def parse_all(self) -> list[SchemaType]:
        """Load the schema and decode its types."""
        return parse_introspection(self.load_document())

    def _collect_schema_files(self) -> list[str]:
        """Collect SDL files from the path."""
        files = []
        if os.path.isfile(self.schema_path):
            if self.schema_path.endswith(SDL_EXTENSIONS):
                files.append(self.schema_path)
        else:
            for root, _, filenames in os.walk(self.schema_path):
                for filename in filenames:
                    if filename.endswith(SDL_EXTENSIONS):
                        files.append(os.path.join(root, filename))
        return sorted(files)

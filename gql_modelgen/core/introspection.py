"""The introspection query sent to a GraphQL endpoint.

Field types are described by ``ofType`` chains: ``[[String!]!]!`` is
NON_NULL -> LIST -> NON_NULL -> LIST -> NON_NULL -> String, six type
references. The query captures ``TYPE_REF_DEPTH`` levels; anything deeper
comes back truncated and is rejected by the resolver, which reports the
same constant.
"""

import textwrap

TYPE_REF_DEPTH = 6


def build_type_ref_fragment(depth: int = TYPE_REF_DEPTH) -> str:
    """Build the ``fragType`` fragment selecting ``depth`` type-reference levels."""
    if depth < 1:
        raise ValueError(f"depth must be at least 1, got {depth}")

    selection = "name\nkind"
    for _ in range(depth - 1):
        selection = f"name\nkind\nofType {{\n{textwrap.indent(selection, '  ')}\n}}"

    return f"fragment fragType on __Type {{\n{textwrap.indent(selection, '  ')}\n}}"


def build_introspection_query(depth: int = TYPE_REF_DEPTH) -> str:
    """Build the full introspection query for the given wrapping depth."""
    return "\n".join([
        build_type_ref_fragment(depth),
        "",
        "fragment fragField on __Field {",
        "  name",
        "  description",
        "  isDeprecated",
        "  deprecationReason",
        "  type {",
        "    ...fragType",
        "  }",
        "}",
        "",
        "{",
        "  __schema {",
        "    types {",
        "      kind",
        "      name",
        "      description",
        "      fields(includeDeprecated: true) {",
        "        ...fragField",
        "      }",
        "      interfaces {",
        "        ...fragType",
        "        fields(includeDeprecated: true) {",
        "          ...fragField",
        "        }",
        "      }",
        "      possibleTypes {",
        "        ...fragType",
        "        fields(includeDeprecated: true) {",
        "          ...fragField",
        "        }",
        "        interfaces {",
        "          ...fragType",
        "        }",
        "      }",
        "      enumValues(includeDeprecated: true) {",
        "        name",
        "        description",
        "        isDeprecated",
        "        deprecationReason",
        "      }",
        "      ofType {",
        "        ...fragType",
        "      }",
        "    }",
        "  }",
        "}",
        "",
    ])


INTROSPECTION_QUERY = build_introspection_query()

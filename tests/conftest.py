"""Shared fixtures."""

import importlib.util
import sys
from pathlib import Path

import pytest

from gql_modelgen.core.parser import SchemaParser

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def zoo_sdl_path() -> Path:
    return FIXTURES / "zoo.graphql"


@pytest.fixture
def zoo_document(zoo_sdl_path):
    """Introspection response for the zoo schema, answered by graphql-core."""
    return SchemaParser(str(zoo_sdl_path)).load_document()


@pytest.fixture
def load_module(tmp_path, monkeypatch):
    """Write generated code to disk and import it as a module."""

    def load(name: str, code: str):
        path = tmp_path / f"{name}.py"
        path.write_text(code, encoding="utf-8")
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, name, module)
        spec.loader.exec_module(module)
        return module

    return load

"""Shared fixtures for gql-fedgen tests."""

import importlib.util
import sys

import pytest

from gql_fedgen.core.config import Config

PRODUCTS_SCHEMA = '''
type Query {
  topProducts(first: Int = 5): [Product]
}

"""A product in the catalogue"""
type Product @key(fields: "upc") {
  upc: String!
  name: String
  price: Int
}

type Review @key(fields: "id") {
  id: ID!
  body: String
  product: Product
}
'''


@pytest.fixture
def products_schema():
    return PRODUCTS_SCHEMA


@pytest.fixture
def make_config(tmp_path):
    """Write ``schema`` to schema.graphql and return a Config rooted at tmp_path."""

    def _make(schema: str, **kwargs) -> Config:
        (tmp_path / "schema.graphql").write_text(schema, encoding="utf-8")
        return Config(base_dir=tmp_path, **kwargs)

    return _make


@pytest.fixture
def load_module(monkeypatch):
    """Import a generated file as a throwaway module."""
    counter = iter(range(1_000_000))

    def _load(path):
        name = f"_generated_{next(counter)}_{path.stem}"
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, name, module)
        spec.loader.exec_module(module)
        return module

    return _load

"""Tests for the type binder."""

import pytest
from graphql import GraphQLList, GraphQLNonNull, GraphQLString, build_schema

from gql_fedgen.core.binder import Binder, unwrap_type
from gql_fedgen.core.config import Config, TypeMapEntry
from gql_fedgen.core.errors import TypeBuildError
from gql_fedgen.core.ir import TypeDescriptor

SCHEMA = """
scalar DateTime
scalar Money

type Query {
  users: [User!]!
  user(id: ID!): User
}

type User {
  id: ID!
  createdAt: DateTime
  balance: Money
}
"""


@pytest.fixture
def schema():
    return build_schema(SCHEMA)


@pytest.fixture
def binder(schema):
    config = Config()
    config.inject_builtins()
    return Binder(config, schema)


class TestUnwrapType:
    """Tests for unwrap_type."""

    def test_named(self):
        assert unwrap_type(GraphQLString) == (True, 0, GraphQLString)

    def test_non_null(self):
        assert unwrap_type(GraphQLNonNull(GraphQLString)) == (False, 0, GraphQLString)

    def test_list_of_non_null(self):
        type_ = GraphQLNonNull(GraphQLList(GraphQLNonNull(GraphQLString)))
        assert unwrap_type(type_) == (False, 1, GraphQLString)

    def test_nested_lists(self):
        type_ = GraphQLList(GraphQLList(GraphQLString))
        assert unwrap_type(type_) == (True, 2, GraphQLString)


class TestResolve:
    """Tests for Binder.resolve."""

    def test_builtin_scalar(self, binder):
        assert binder.resolve("String") == TypeDescriptor(name="str")
        assert binder.resolve("ID") == TypeDescriptor(name="str")
        assert binder.resolve("Int") == TypeDescriptor(name="int")

    def test_registered_scalar(self, binder):
        assert binder.resolve("DateTime") == TypeDescriptor(name="datetime", module="datetime")

    def test_unbound_scalar(self, binder):
        with pytest.raises(TypeBuildError, match="Money"):
            binder.resolve("Money")

    def test_object_binds_to_models_package(self, binder):
        assert binder.resolve("User") == TypeDescriptor(name="User", module="generated.models")

    def test_unknown_type(self, binder):
        with pytest.raises(TypeBuildError, match="not defined"):
            binder.resolve("Nope")

    def test_config_binding_wins(self, schema):
        config = Config(models={"Money": TypeMapEntry(model="decimal.Decimal")})
        config.inject_builtins()
        binder = Binder(config, schema)
        assert binder.resolve("Money") == TypeDescriptor(name="Decimal", module="decimal")


class TestTypeReference:
    """Tests for Binder.type_reference."""

    def test_list_of_objects(self, binder, schema):
        ref = binder.type_reference(schema.query_type.fields["users"].type)
        assert str(ref) == "[User!]!"
        assert ref.type_name == "User"
        assert ref.nullable is False
        assert ref.list_depth == 1
        assert ref.annotation() == "list[User]"

    def test_nullable_annotation(self, binder, schema):
        ref = binder.type_reference(schema.get_type("User").fields["createdAt"].type)
        assert ref.annotation() == "Optional[datetime]"

    def test_records_references(self, binder, schema):
        ref = binder.type_reference(schema.query_type.fields["users"].type)
        again = binder.type_reference(schema.query_type.fields["users"].type)
        assert again is ref
        assert binder.references == {"[User!]!": ref}

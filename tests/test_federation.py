"""Tests for the federation plugin and entity synthesis."""

import pytest
from graphql import build_schema

from gql_fedgen.api import build
from gql_fedgen.core import entities
from gql_fedgen.core.config import TypeMapEntry
from gql_fedgen.core.errors import ConfigValidationError, MissingQueryRootError, UnsupportedKeyError
from gql_fedgen.core.ir import Entity, TypeDescriptor
from gql_fedgen.plugins.federation import FederationPlugin

PLAIN_SCHEMA = """
type Query { hello: String }
type Thing { id: ID! }
"""


@pytest.fixture
def data(make_config, products_schema):
    return build(make_config(products_schema, federated=True))


class TestResolverName:
    """Tests for resolver_name."""

    def test_title_cases_key_field(self):
        assert entities.resolver_name("Product", "upc") == "findProductByUpc"

    def test_keeps_rest_of_key_field(self):
        assert entities.resolver_name("User", "emailAddress") == "findUserByEmailAddress"
        assert entities.resolver_name("Account", "id") == "findAccountById"


class TestEntitySource:
    """Tests for the generated Entity resolver root."""

    def test_lists_resolvers(self):
        source = entities.entity_source(
            [
                Entity(name="Product", key_field="upc", key_type_gql="String!", resolver_name="findProductByUpc"),
                Entity(name="Review", key_field="id", key_type_gql="ID!", resolver_name="findReviewById"),
            ]
        )
        assert source == (
            "type Entity {\n"
            "\tfindProductByUpc(upc: String!): Product!\n"
            "\tfindReviewById(id: ID!): Review!\n"
            "}\n"
        )


class TestMutateConfig:
    """Tests for reserved type bindings."""

    def test_reserves_models(self, make_config, products_schema):
        config = make_config(products_schema, federated=True)
        FederationPlugin().mutate_config(config)
        assert config.models["_Service"].model == ["gql_fedgen.runtime.Service"]
        assert config.models["_Any"].model == ["gql_fedgen.runtime.Map"]
        assert config.models["_FieldSet"].model == ["builtins.str"]
        assert "Entity" in config.models

    @pytest.mark.parametrize("type_name", ["_Service", "_Any", "Entity"])
    def test_rejects_existing_binding(self, make_config, products_schema, type_name):
        config = make_config(
            products_schema,
            federated=True,
            models={type_name: TypeMapEntry(model="myapp.models.Thing")},
        )
        with pytest.raises(ConfigValidationError, match=f"{type_name} already exists"):
            FederationPlugin().mutate_config(config)


class TestInjectSources:
    """Tests for schema sources added by the plugin."""

    def test_adds_federation_and_entity_sources(self, make_config, products_schema):
        config = make_config(products_schema, federated=True)
        plugin = FederationPlugin()
        plugin.mutate_config(config)
        config.read_sources()
        plugin.inject_sources(config)

        assert [s.name for s in config.additional_sources] == ["federation.graphql", "entity.graphql"]
        assert config.additional_sources[1].builtin is True
        assert [e.name for e in plugin.entities] == ["Product", "Review"]
        assert config.models["Entity"].fields["findProductByUpc"].resolver is True

    def test_no_entity_source_without_keys(self, make_config):
        config = make_config(PLAIN_SCHEMA, federated=True)
        plugin = FederationPlugin()
        plugin.mutate_config(config)
        config.read_sources()
        plugin.inject_sources(config)
        assert [s.name for s in config.additional_sources] == ["federation.graphql"]
        assert plugin.entities == []

    def test_multi_field_key_is_an_error(self, make_config, products_schema):
        config = make_config(products_schema.replace('"upc"', '"upc name"'), federated=True)
        with pytest.raises(UnsupportedKeyError, match="only single fields"):
            build(config)


class TestFederatedData:
    """Tests for the IR of a federated schema."""

    def test_entities_sorted(self, data):
        assert [e.name for e in data.entities] == ["Product", "Review"]
        assert [e.resolver_name for e in data.entities] == ["findProductByUpc", "findReviewById"]

    def test_entity_key_types(self, data):
        assert [e.key_type.target for e in data.entities] == [TypeDescriptor(name="str"), TypeDescriptor(name="str")]

    def test_entity_union(self, data):
        union = data.interfaces["_Entity"]
        assert union.kind == "union"
        assert union.possible_types == ["Product", "Review"]
        assert "_Entity" in data.objects.by_name("Product").implements
        assert "_Entity" not in data.objects.by_name("Query").implements

    def test_query_plumbing(self, data):
        entities_field = data.query_root.field_by_name("_entities")
        assert str(entities_field.type_reference) == "[_Entity]!"
        assert str(entities_field.arguments[0].type_reference) == "[_Any!]!"
        service_field = data.query_root.field_by_name("_service")
        assert service_field.type_reference.target == TypeDescriptor(name="Service", module="gql_fedgen.runtime")

    def test_entity_resolver_root(self, data):
        entity = data.objects.by_name("Entity")
        assert entity.root is True
        assert [f.name for f in entity.fields] == ["findProductByUpc", "findReviewById"]

    def test_federation_directives_surface(self, data):
        assert {"key", "external", "requires", "provides", "extends"} <= set(data.directives)

    def test_sdl_hides_plumbing_fields(self, data):
        assert "_entities" not in data.sdl
        assert "_service:" not in data.sdl
        assert "[_Entity]!" not in data.sdl
        assert 'type Product @key(fields: "upc") {' in data.sdl

    def test_sdl_hides_federation_machinery(self, data):
        assert "type Entity" not in data.sdl
        assert "findProductByUpc" not in data.sdl
        assert "type _Service" not in data.sdl
        assert "union _Entity" not in data.sdl
        assert "scalar _Any" not in data.sdl
        assert "directive @key(fields: _FieldSet!) on OBJECT | INTERFACE" in data.sdl
        assert "scalar _FieldSet" in data.sdl

    def test_full_schema_keeps_plumbing(self, data):
        full = data.schema_str["schema.graphql"]
        assert "_entities(representations: [_Any!]!): [_Entity]!" in full
        assert "_service: _Service!" in full
        assert "type Entity {" in full
        assert "union _Entity = Product | Review" in full

    def test_no_entities(self, make_config):
        data = build(make_config(PLAIN_SCHEMA, federated=True))
        assert data.entities == []
        assert "_Entity" not in data.interfaces
        assert data.query_root.field_by_name("_entities") is None
        assert data.query_root.field_by_name("_service") is not None
        assert data.objects.by_name("Entity") is None

    def test_entity_union_sorted_regardless_of_declaration_order(self, make_config):
        schema = (
            'type Query { a: Int }\n'
            'type Review @key(fields: "id") { id: ID! }\n'
            'type Product @key(fields: "upc") { upc: String! }\n'
        )
        data = build(make_config(schema, federated=True))
        assert [e.name for e in data.entities] == ["Product", "Review"]
        assert data.interfaces["_Entity"].possible_types == ["Product", "Review"]
        assert [t.name for t in data.schema.type_map["_Entity"].types] == ["Product", "Review"]
        assert "union _Entity = Product | Review" in data.schema_str["schema.graphql"]

    def test_deterministic(self, make_config, products_schema):
        first = build(make_config(products_schema, federated=True))
        second = build(make_config(products_schema, federated=True))
        assert first.sdl == second.sdl
        assert [e.resolver_name for e in first.entities] == [e.resolver_name for e in second.entities]
        assert [f.name for f in first.query_root.fields] == [f.name for f in second.query_root.fields]


class TestSchemaHelpers:
    """Tests for the idempotent schema helpers."""

    def test_helpers_are_idempotent(self):
        schema = build_schema(
            'directive @key(fields: String!) on OBJECT\n'
            'type Query { a: Int }\n'
            'type Product @key(fields: "upc") { upc: String! }'
        )
        found = entities.discover_entities(schema)
        first_union = entities.add_entity_union(schema, found)
        first_fields = entities.add_query_fields(schema)

        assert entities.add_entity_union(schema, found) is first_union
        assert entities.add_query_fields(schema) == first_fields
        assert list(first_fields) == ["_entities", "_service"]

    def test_no_union_without_entities(self):
        schema = build_schema("type Query { a: Int }")
        assert entities.add_entity_union(schema, []) is None
        assert list(entities.add_query_fields(schema)) == ["_service"]

    def test_query_fields_need_query_root(self):
        schema = build_schema("type Mutation { a: Int }")
        with pytest.raises(MissingQueryRootError):
            entities.add_query_fields(schema)

"""Apollo federation support.

Injects the federation directives and scalars into the schema, discovers
entities from @key, adds the ``_entities`` and ``_service`` query fields and
generates the module that dispatches entity representations to resolvers.
"""

import logging

from graphql import GraphQLSchema

from ..core import entities as federation
from ..core.config import Config, SchemaSource, TypeMapEntry, TypeMapField
from ..core.errors import ConfigValidationError, TypeBuildError
from ..core.ir import Data, Entity
from ..core.templates import Renderer

logger = logging.getLogger(__name__)

FEDERATION_SOURCE_NAME = "federation.graphql"
ENTITY_SOURCE_NAME = "entity.graphql"

FEDERATION_SOURCE = """\
# Declarations as required by the federation spec
# See: https://www.apollographql.com/docs/apollo-server/federation/federation-spec/

scalar _Any
scalar _FieldSet

directive @external on FIELD_DEFINITION
directive @requires(fields: _FieldSet!) on FIELD_DEFINITION
directive @provides(fields: _FieldSet!) on FIELD_DEFINITION
directive @key(fields: _FieldSet!) on OBJECT | INTERFACE
directive @extends on OBJECT
"""

RESERVED_MODELS = {
    federation.SERVICE_TYPE: "gql_fedgen.runtime.Service",
    federation.ANY_SCALAR: "gql_fedgen.runtime.Map",
    "_FieldSet": "builtins.str",
}


class FederationPlugin:
    """Plugin implementing every pipeline hook for federated services."""

    def __init__(self):
        self.entities: list[Entity] = []

    def name(self) -> str:
        return "federation"

    def mutate_config(self, config: Config) -> None:
        reserved = {name: TypeMapEntry(model=[path]) for name, path in RESERVED_MODELS.items()}
        # Resolver fields are registered once entities are known
        reserved[federation.ENTITY_RESOLVER_TYPE] = TypeMapEntry()

        for type_name, entry in reserved.items():
            if type_name in config.models:
                raise ConfigValidationError(
                    f"{type_name} already exists which must be reserved when federation is enabled"
                )
            config.models[type_name] = entry

    def inject_sources(self, config: Config) -> None:
        config.additional_sources.append(SchemaSource(name=FEDERATION_SOURCE_NAME, body=FEDERATION_SOURCE))

        self.entities = federation.discover_entities(config.load_schema())
        if not self.entities:
            logger.debug("No @key types found; skipping %s", ENTITY_SOURCE_NAME)
            return

        entity_model = config.models.setdefault(federation.ENTITY_RESOLVER_TYPE, TypeMapEntry())
        for entity in self.entities:
            entity_model.fields[entity.resolver_name] = TypeMapField(resolver=True)

        config.additional_sources.append(
            SchemaSource(
                name=ENTITY_SOURCE_NAME,
                body=federation.entity_source(self.entities),
                builtin=True,
            )
        )

    def mutate_schema(self, schema: GraphQLSchema) -> None:
        federation.add_entity_union(schema, self.entities)
        federation.add_service_type(schema)
        federation.add_query_fields(schema)

    def generate_code(self, data: Data, renderer: Renderer) -> None:
        for entity in data.entities:
            obj = data.objects.by_name(entity.name)
            key_field = obj.field_by_name(entity.key_field) if obj is not None else None
            if key_field is None:
                raise TypeBuildError(f"entity {entity.name}: no field {entity.key_field!r} in the built IR")
            entity.key_type = key_field.type_reference

        config = data.config
        renderer.render(
            "service.py.j2",
            package_name=config.federation.package,
            filename=config.resolve_path(config.federation.filename),
            data={"sdl": data.sdl, "entities": data.entities},
        )
        logger.debug("Generated federation service with %d entities", len(data.entities))

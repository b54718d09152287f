"""Federation entities: discovery from @key directives and schema synthesis.

The helpers that add federation constructs to a schema are idempotent, so
both the federation plugin and the IR builder may call them on the same
schema graph.
"""

import logging

from graphql import (
    GraphQLArgument,
    GraphQLError,
    GraphQLField,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLString,
    GraphQLUnionType,
    get_named_type,
    is_introspection_type,
    is_object_type,
)
from graphql.execution.values import get_argument_values

from .errors import DirectiveBuildError, MissingQueryRootError, TypeBuildError, UnsupportedKeyError
from .ir import Entity
from .printer import directive_nodes

logger = logging.getLogger(__name__)

KEY_DIRECTIVE = "key"
ENTITY_UNION = "_Entity"
ENTITY_RESOLVER_TYPE = "Entity"
SERVICE_TYPE = "_Service"
ANY_SCALAR = "_Any"
ENTITIES_FIELD = "_entities"
SERVICE_FIELD = "_service"


def resolver_name(type_name: str, key_field: str) -> str:
    """Return the resolver identifier, e.g. ('Product', 'upc') -> 'findProductByUpc'."""
    return f"find{type_name}By{key_field[:1].upper()}{key_field[1:]}"


def key_field_name(schema: GraphQLSchema, type_def: GraphQLNamedType) -> str | None:
    """Return the field named by the type's first @key, or None.

    Raises:
        UnsupportedKeyError: if the key names more than one field
    """
    key_def = schema.get_directive(KEY_DIRECTIVE)
    if key_def is None:
        return None

    for node in directive_nodes(type_def):
        if node.name.value != KEY_DIRECTIVE:
            continue
        try:
            arguments = get_argument_values(key_def, node)
        except GraphQLError as e:
            raise DirectiveBuildError(f"{type_def.name}: @{KEY_DIRECTIVE}: {e.message}") from e
        fields = arguments.get("fields")
        if not isinstance(fields, str) or len(fields.split()) != 1:
            raise UnsupportedKeyError(type_def.name, str(fields))
        return fields.strip()
    return None


def discover_entities(schema: GraphQLSchema) -> list[Entity]:
    """Find every object type carrying @key, sorted by type name."""
    entities = []
    for type_def in schema.type_map.values():
        if not is_object_type(type_def) or is_introspection_type(type_def):
            continue
        key = key_field_name(schema, type_def)
        if key is None:
            continue
        key_field = type_def.fields.get(key)
        if key_field is None:
            raise UnsupportedKeyError(type_def.name, key, f"{type_def.name} has no field {key!r}")
        entities.append(
            Entity(
                name=type_def.name,
                key_field=key,
                key_type_gql=str(key_field.type),
                resolver_name=resolver_name(type_def.name, key),
                definition=type_def,
            )
        )

    entities.sort(key=lambda e: e.name)
    logger.debug("Discovered %d entities: %s", len(entities), [e.name for e in entities])
    return entities


def entity_source(entities: list[Entity]) -> str:
    """Schema text declaring the Entity resolver root for ``entities``."""
    lines = [f"type {ENTITY_RESOLVER_TYPE} {{"]
    for e in entities:
        lines.append(f"\t{e.resolver_name}({e.key_field}: {e.key_type_gql}): {e.name}!")
    lines.append("}")
    return "\n".join(lines) + "\n"


def _any_scalar(schema: GraphQLSchema) -> GraphQLScalarType:
    any_type = schema.type_map.get(ANY_SCALAR)
    if any_type is None:
        any_type = GraphQLScalarType(ANY_SCALAR)
        schema.type_map[ANY_SCALAR] = any_type
    return any_type


def add_entity_union(schema: GraphQLSchema, entities: list[Entity]) -> GraphQLUnionType | None:
    """Ensure ``_Entity`` exists with exactly the entity types as members.

    No union is added when there are no entities.
    """
    if not entities:
        return None

    members = []
    for e in entities:
        member = schema.type_map.get(e.name)
        if not is_object_type(member):
            raise TypeBuildError(f"entity {e.name} is not an object type in the schema")
        members.append(member)

    union = schema.type_map.get(ENTITY_UNION)
    if isinstance(union, GraphQLUnionType) and [t.name for t in union.types] == [m.name for m in members]:
        return union

    union = GraphQLUnionType(
        ENTITY_UNION,
        types=members,
        description="A union of all types that declare a @key",
    )
    schema.type_map[ENTITY_UNION] = union
    return union


def add_service_type(schema: GraphQLSchema) -> GraphQLObjectType:
    """Ensure the ``_Service { sdl: String! }`` type exists."""
    service = schema.type_map.get(SERVICE_TYPE)
    if service is None:
        string_type = schema.type_map.get("String", GraphQLString)
        service = GraphQLObjectType(SERVICE_TYPE, {"sdl": GraphQLField(GraphQLNonNull(string_type))})
        schema.type_map[SERVICE_TYPE] = service
    return service


def add_query_fields(schema: GraphQLSchema) -> dict[str, GraphQLField]:
    """Ensure ``_entities`` (when ``_Entity`` exists) and ``_service`` are on the query root.

    Returns the federation fields now present on the query root.
    """
    query = schema.query_type
    if query is None:
        raise MissingQueryRootError("query entry point missing")

    union = schema.type_map.get(ENTITY_UNION)
    if isinstance(union, GraphQLUnionType):
        existing = query.fields.get(ENTITIES_FIELD)
        if existing is None or get_named_type(existing.type) is not union:
            representations = GraphQLNonNull(GraphQLList(GraphQLNonNull(_any_scalar(schema))))
            query.fields[ENTITIES_FIELD] = GraphQLField(
                GraphQLNonNull(GraphQLList(union)),
                args={"representations": GraphQLArgument(representations)},
            )

    if SERVICE_FIELD not in query.fields:
        query.fields[SERVICE_FIELD] = GraphQLField(GraphQLNonNull(add_service_type(schema)))

    return {name: query.fields[name] for name in (ENTITIES_FIELD, SERVICE_FIELD) if name in query.fields}

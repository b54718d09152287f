"""IR builder.

Builds ``Data`` from a fully mutated schema graph. The build is a single
synchronous pass; any failure aborts it and no partial ``Data`` is returned.
"""

import logging

from graphql import (
    DirectiveLocation,
    GraphQLError,
    GraphQLNamedType,
    GraphQLSchema,
    SchemaMetaFieldDef,
    TypeMetaFieldDef,
    is_input_object_type,
    is_interface_type,
    is_introspection_type,
    is_object_type,
    is_specified_directive,
    is_union_type,
    value_from_ast,
)
from graphql.execution.values import get_argument_values
from graphql.pyutils import Undefined

from . import entities as federation
from .binder import Binder
from .config import Config
from .errors import DirectiveBuildError, MissingQueryRootError, TypeBuildError, UnsupportedKeyError
from .ir import AppliedDirective, Argument, Data, Directive, Entity, Field, Interface, Object
from .printer import directive_nodes, print_schema

logger = logging.getLogger(__name__)

SCHEMA_FILENAME = "schema.graphql"


def source_name(definition) -> str | None:
    """Name of the schema source a definition was parsed from, if any."""
    ast_node = getattr(definition, "ast_node", None)
    if ast_node is None or ast_node.loc is None:
        return None
    return ast_node.loc.source.name


def default_value(arg):
    """Python value of an argument default, or None when there is none.

    Read from the AST where possible; newer graphql-core releases keep SDL
    defaults off ``GraphQLArgument.default_value``.
    """
    ast_node = getattr(arg, "ast_node", None)
    if ast_node is not None and ast_node.default_value is not None:
        value = value_from_ast(ast_node.default_value, arg.type)
    else:
        value = getattr(arg, "default_value", Undefined)
    return None if value is Undefined else value


def build_data(config: Config, schema: GraphQLSchema) -> Data:
    """Build the IR for ``schema``.

    Raises:
        GenerationError: any subclass, from whichever stage failed
    """
    return DataBuilder(config, schema).build()


class DataBuilder:
    """Builds Data from a schema graph and a type binder."""

    def __init__(self, config: Config, schema: GraphQLSchema):
        self.config = config
        self.schema = schema
        self.binder: Binder | None = None
        self.directives: dict[str, Directive] = {}

    def build(self) -> Data:
        self.config.check()
        self.config.apply_autobind(self.schema)
        self.config.inject_builtins()
        self.binder = Binder(self.config, self.schema)
        self.directives = self._build_directives()

        data = Data(
            config=self.config,
            schema=self.schema,
            directives={name: d for name, d in sorted(self.directives.items()) if not d.builtin},
        )

        union_members = self._union_members()
        for type_def in list(self.schema.type_map.values()):
            if is_introspection_type(type_def):
                continue
            if is_object_type(type_def):
                obj = self._build_object(type_def, union_members)
                data.objects.append(obj)
                entity = self._build_entity(type_def, obj)
                if entity is not None:
                    data.entities.append(entity)
            elif is_input_object_type(type_def):
                data.inputs.append(self._build_object(type_def))
            elif is_union_type(type_def) or is_interface_type(type_def):
                data.interfaces[type_def.name] = self._build_interface(type_def)

        data.entities.sort(key=lambda e: e.name)
        self._resolve_roots(data)
        self._inject_introspection_roots(data)
        if self.config.federated:
            self._inject_federation(data)

        data.referenced_types = dict(sorted(self.binder.references.items()))
        self._bind_entities(data)
        data.objects.sort(key=lambda o: o.name)
        data.inputs.sort(key=lambda o: o.name)

        data.schema_str = {SCHEMA_FILENAME: print_schema(self.schema)}
        data.sdl = print_schema(
            self.schema,
            hidden_fields=self._hidden_fields(data),
            hidden_types=self._hidden_types(),
        )

        logger.debug(
            "Built IR: %d objects, %d inputs, %d interfaces, %d entities",
            len(data.objects),
            len(data.inputs),
            len(data.interfaces),
            len(data.entities),
        )
        return data

    def _build_directives(self) -> dict[str, Directive]:
        builtin_sources = self.config.builtin_source_names
        directives = {}
        for definition in self.schema.directives:
            directives[definition.name] = Directive(
                name=definition.name,
                builtin=is_specified_directive(definition) or source_name(definition) in builtin_sources,
                arguments=[
                    self._build_argument(f"@{definition.name}", name, arg, collect_directives=False)
                    for name, arg in definition.args.items()
                ],
                locations=[location.name for location in definition.locations],
                repeatable=definition.is_repeatable,
                definition=definition,
            )
        return directives

    def _collect_directives(self, definition, location: DirectiveLocation, owner: str) -> list[AppliedDirective]:
        """Read directive applications by named argument against their declarations."""
        applied = []
        for node in directive_nodes(definition):
            name = node.name.value
            declared = self.schema.get_directive(name)
            if declared is None or name not in self.directives:
                raise DirectiveBuildError(f"{owner}: unknown directive @{name}")
            if location not in declared.locations:
                raise DirectiveBuildError(f"{owner}: @{name} may not be used on {location.name}")
            try:
                arguments = get_argument_values(declared, node)
            except GraphQLError as e:
                raise DirectiveBuildError(f"{owner}: @{name}: {e.message}") from e
            applied.append(AppliedDirective(name=name, arguments=arguments, definition=self.directives[name]))
        return applied

    def _union_members(self) -> dict[str, list[str]]:
        members: dict[str, list[str]] = {}
        for type_def in self.schema.type_map.values():
            if is_union_type(type_def):
                for member in type_def.types:
                    members.setdefault(member.name, []).append(type_def.name)
        return members

    def _build_object(self, type_def: GraphQLNamedType, union_members: dict[str, list[str]] | None = None) -> Object:
        is_input = is_input_object_type(type_def)
        location = DirectiveLocation.INPUT_OBJECT if is_input else DirectiveLocation.OBJECT
        obj = Object(
            name=type_def.name,
            definition=type_def,
            directives=self._collect_directives(type_def, location, type_def.name),
            is_input=is_input,
            description=type_def.description,
        )
        if not is_input:
            obj.implements = [i.name for i in type_def.interfaces]
            obj.implements.extend((union_members or {}).get(type_def.name, []))

        for name, field_def in type_def.fields.items():
            obj.fields.append(self._build_field(type_def.name, name, field_def, is_input))
        return obj

    def _build_field(self, owner: str, name: str, field_def, is_input: bool = False) -> Field:
        path = f"{owner}.{name}"
        try:
            type_reference = self.binder.type_reference(field_def.type)
        except TypeBuildError as e:
            raise TypeBuildError(f"{path}: {e.message}") from e

        location = DirectiveLocation.INPUT_FIELD_DEFINITION if is_input else DirectiveLocation.FIELD_DEFINITION
        arguments = []
        if not is_input:
            arguments = [self._build_argument(path, arg_name, arg) for arg_name, arg in field_def.args.items()]

        return Field(
            name=name,
            type_reference=type_reference,
            arguments=arguments,
            directives=self._collect_directives(field_def, location, path),
            description=field_def.description,
            definition=field_def,
        )

    def _build_argument(self, owner: str, name: str, arg, collect_directives: bool = True) -> Argument:
        path = f"{owner}({name})"
        try:
            type_reference = self.binder.type_reference(arg.type)
        except TypeBuildError as e:
            raise TypeBuildError(f"{path}: {e.message}") from e

        directives = []
        if collect_directives:
            directives = self._collect_directives(arg, DirectiveLocation.ARGUMENT_DEFINITION, path)

        return Argument(
            name=name,
            type_reference=type_reference,
            default_value=default_value(arg),
            description=arg.description,
            directives=directives,
        )

    def _build_interface(self, type_def: GraphQLNamedType) -> Interface:
        kind = "union" if is_union_type(type_def) else "interface"
        return Interface(
            name=type_def.name,
            kind=kind,
            definition=type_def,
            possible_types=[t.name for t in self.schema.get_possible_types(type_def)],
        )

    def _build_entity(self, type_def: GraphQLNamedType, obj: Object) -> Entity | None:
        key = federation.key_field_name(self.schema, type_def)
        if key is None:
            return None
        key_field = obj.field_by_name(key)
        if key_field is None:
            raise UnsupportedKeyError(type_def.name, key, f"{type_def.name} has no field {key!r}")
        return Entity(
            name=obj.name,
            key_field=key,
            key_type_gql=str(key_field.type_reference),
            resolver_name=federation.resolver_name(obj.name, key),
            definition=type_def,
        )

    def _resolve_roots(self, data: Data):
        query_type = self.schema.query_type
        if query_type is None or data.objects.by_name(query_type.name) is None:
            raise MissingQueryRootError("query entry point missing")
        data.query_root = data.objects.by_name(query_type.name)
        data.query_root.root = True

        if self.schema.mutation_type is not None:
            data.mutation_root = data.objects.by_name(self.schema.mutation_type.name)
            data.mutation_root.root = True

        if self.schema.subscription_type is not None:
            data.subscription_root = data.objects.by_name(self.schema.subscription_type.name)
            data.subscription_root.root = True

    def _inject_introspection_roots(self, data: Data):
        """Add __type and __schema to the query root in both the schema and the IR."""
        query_type = self.schema.query_type
        for name, field_def in (("__type", TypeMetaFieldDef), ("__schema", SchemaMetaFieldDef)):
            if name not in query_type.fields:
                query_type.fields[name] = field_def
            if data.query_root.field_by_name(name) is None:
                data.query_root.fields.append(self._build_field(query_type.name, name, query_type.fields[name]))

    def _inject_federation(self, data: Data):
        """Make sure the entity union and service plumbing exist in the schema and the IR."""
        union = federation.add_entity_union(self.schema, data.entities)
        entity_names = {e.name for e in data.entities}
        if union is not None:
            current = data.interfaces.get(union.name)
            if current is None or current.definition is not union:
                data.interfaces[union.name] = self._build_interface(union)
            for obj in data.objects:
                if obj.name in entity_names and union.name not in obj.implements:
                    obj.implements.append(union.name)
                elif obj.name not in entity_names and union.name in obj.implements:
                    obj.implements.remove(union.name)

        service = federation.add_service_type(self.schema)
        if data.objects.by_name(service.name) is None:
            data.objects.append(self._build_object(service))

        query_name = self.schema.query_type.name
        for name, field_def in federation.add_query_fields(self.schema).items():
            existing = data.query_root.field_by_name(name)
            if existing is None:
                data.query_root.fields.append(self._build_field(query_name, name, field_def))
            elif existing.definition is not field_def:
                index = data.query_root.fields.index(existing)
                data.query_root.fields[index] = self._build_field(query_name, name, field_def)

        entity_root = data.objects.by_name(federation.ENTITY_RESOLVER_TYPE)
        if entity_root is not None:
            entity_root.root = True

    def _bind_entities(self, data: Data):
        for entity in data.entities:
            obj = data.objects.by_name(entity.name)
            key_field = obj.field_by_name(entity.key_field) if obj is not None else None
            if key_field is None:
                raise TypeBuildError(f"entity {entity.name}: key field {entity.key_field!r} has no resolved type")
            entity.key_type = key_field.type_reference

    def _hidden_fields(self, data: Data) -> tuple[tuple[str, str], ...]:
        if not self.config.federated:
            return ()
        return (
            (data.query_root.name, federation.ENTITIES_FIELD),
            (data.query_root.name, federation.SERVICE_FIELD),
        )

    def _hidden_types(self) -> list[str]:
        """Federation machinery and types from builtin sources, kept out of the published SDL."""
        if not self.config.federated:
            return []
        builtin_sources = self.config.builtin_source_names
        hidden = [federation.ENTITY_UNION, federation.SERVICE_TYPE, federation.ANY_SCALAR]
        hidden.extend(
            name for name, type_def in self.schema.type_map.items() if source_name(type_def) in builtin_sources
        )
        return sorted(set(hidden))

"""Type binder: maps schema types to Python types."""

import logging

from graphql import GraphQLNamedType, GraphQLSchema, GraphQLType, is_list_type, is_non_null_type, is_scalar_type

from .config import Config
from .errors import TypeBuildError
from .ir import TypeDescriptor, TypeReference
from .scalars import ScalarRegistry

logger = logging.getLogger(__name__)


def unwrap_type(type_: GraphQLType) -> tuple[bool, int, GraphQLNamedType]:
    """Return (nullable, list_depth, named_type) for a wrapped type.

    Only the outermost non-null wrapper decides nullability; non-null
    wrappers inside lists are skipped.
    """
    nullable = True
    if is_non_null_type(type_):
        nullable = False
        type_ = type_.of_type

    list_depth = 0
    while is_list_type(type_) or is_non_null_type(type_):
        if is_list_type(type_):
            list_depth += 1
        type_ = type_.of_type

    return nullable, list_depth, type_


class Binder:
    """Resolves schema type names to Python type descriptors.

    Lookup order: explicit ``models`` bindings in the config, registered
    scalar handlers, then non-scalar schema types, which bind to the
    generated models module.
    """

    def __init__(self, config: Config, schema: GraphQLSchema, scalars: ScalarRegistry | None = None):
        self.config = config
        self.schema = schema
        self.scalars = scalars or ScalarRegistry()
        self.references: dict[str, TypeReference] = {}

    def resolve(self, type_name: str) -> TypeDescriptor:
        entry = self.config.models.get(type_name)
        if entry is not None and entry.model:
            return TypeDescriptor.from_path(entry.model[0])

        type_def = self.schema.get_type(type_name)
        if type_def is None:
            raise TypeBuildError(f"{type_name} is not defined in the schema")

        if is_scalar_type(type_def):
            descriptor = self.scalars.descriptor(type_name)
            if descriptor is None:
                raise TypeBuildError(
                    f"scalar {type_name} has no binding; map it under 'models' or register a scalar handler"
                )
            return descriptor

        return TypeDescriptor(name=type_name, module=self.config.model.package)

    def type_reference(self, type_: GraphQLType) -> TypeReference:
        """Bind a (possibly wrapped) schema type and record the reference."""
        key = str(type_)
        if key in self.references:
            return self.references[key]

        nullable, list_depth, named = unwrap_type(type_)
        ref = TypeReference(
            definition=type_,
            type_name=named.name,
            target=self.resolve(named.name),
            nullable=nullable,
            list_depth=list_depth,
        )
        self.references[key] = ref
        logger.debug("Bound %s to %s", key, ref.target)
        return ref

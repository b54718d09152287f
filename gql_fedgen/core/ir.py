"""Intermediate Representation (IR) for code generation.

This module defines the dataclasses that make up ``Data``, the unified,
type-resolved model built from a schema graph and consumed by plugins
that emit code.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from graphql import GraphQLSchema

    from .config import Config


@dataclass(frozen=True)
class TypeDescriptor:
    """A Python type that a schema type is bound to."""
    name: str
    module: str | None = None  # None for builtins

    @classmethod
    def from_path(cls, path: str) -> "TypeDescriptor":
        """Build a descriptor from a dotted path like 'pkg.module.Name'."""
        module, _, name = path.rpartition(".")
        if module in ("", "builtins"):
            return cls(name=name)
        return cls(name=name, module=module)

    @property
    def import_statement(self) -> str:
        if not self.module:
            return ""
        return f"from {self.module} import {self.name}"

    @property
    def is_any(self) -> bool:
        return self.name == "Any" and self.module == "typing"

    def __str__(self) -> str:
        if self.module:
            return f"{self.module}.{self.name}"
        return self.name


@dataclass
class TypeReference:
    """A schema type (with list/non-null wrapping) bound to a Python type."""
    definition: Any  # the wrapped GraphQLType
    type_name: str
    target: TypeDescriptor
    nullable: bool = True
    list_depth: int = 0

    def __str__(self) -> str:
        return str(self.definition)

    def annotation(self) -> str:
        """Return the Python annotation, naming the target type by bare name."""
        result = self.target.name
        for _ in range(self.list_depth):
            result = f"list[{result}]"
        if self.nullable:
            result = f"Optional[{result}]"
        return result


@dataclass
class Directive:
    """A directive declared in the schema."""
    name: str
    builtin: bool = False
    arguments: list["Argument"] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    repeatable: bool = False
    definition: Any = None


@dataclass
class AppliedDirective:
    """A directive applied to a type, field or argument."""
    name: str
    arguments: dict[str, Any]
    definition: Directive


@dataclass
class Argument:
    """An argument of a field or directive."""
    name: str
    type_reference: TypeReference
    default_value: Any = None
    description: str | None = None
    directives: list[AppliedDirective] = field(default_factory=list)


@dataclass
class Field:
    """A field of an object or input object."""
    name: str
    type_reference: TypeReference
    arguments: list[Argument] = field(default_factory=list)
    directives: list[AppliedDirective] = field(default_factory=list)
    description: str | None = None
    definition: Any = None

    def directive(self, name: str) -> AppliedDirective | None:
        for applied in self.directives:
            if applied.name == name:
                return applied
        return None


@dataclass
class Object:
    """An object or input object type."""
    name: str
    definition: Any
    fields: list[Field] = field(default_factory=list)
    implements: list[str] = field(default_factory=list)
    directives: list[AppliedDirective] = field(default_factory=list)
    root: bool = False
    is_input: bool = False
    description: str | None = None

    def field_by_name(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


class Objects(list):
    """A list of Object with lookup by name."""

    def by_name(self, name: str) -> Object | None:
        for obj in self:
            if obj.name == name:
                return obj
        return None


@dataclass
class Interface:
    """An interface or union type and the object types it covers."""
    name: str
    kind: str  # 'interface' or 'union'
    definition: Any
    possible_types: list[str] = field(default_factory=list)


@dataclass
class Entity:
    """A federated type declared with a single-field @key."""
    name: str
    key_field: str
    key_type_gql: str
    resolver_name: str
    definition: Any = None
    # Bound once the IR has resolved every TypeReference
    key_type: TypeReference | None = None


@dataclass
class Data:
    """Unified model of the code to be generated."""
    config: "Config"
    schema: "GraphQLSchema"
    schema_str: dict[str, str] = field(default_factory=dict)
    directives: dict[str, Directive] = field(default_factory=dict)
    objects: Objects = field(default_factory=Objects)
    inputs: Objects = field(default_factory=Objects)
    interfaces: dict[str, Interface] = field(default_factory=dict)
    referenced_types: dict[str, TypeReference] = field(default_factory=dict)
    entities: list[Entity] = field(default_factory=list)
    sdl: str = ""

    query_root: Object | None = None
    mutation_root: Object | None = None
    subscription_root: Object | None = None

"""Core modules for building the IR and running plugins."""

from .builder import build_data
from .config import Config, PackageConfig, SchemaSource, TypeMapEntry, TypeMapField, find_config, load_config
from .errors import (
    AutobindError,
    ConfigValidationError,
    DirectiveBuildError,
    EntityTypeMismatchError,
    FederationError,
    GenerationError,
    IntrospectionDisabledError,
    MissingQueryRootError,
    RenderError,
    SchemaLoadError,
    TypeBuildError,
    UnknownEntityTypeError,
    UnsupportedKeyError,
)
from .ir import (
    AppliedDirective,
    Argument,
    Data,
    Directive,
    Entity,
    Field,
    Interface,
    Object,
    Objects,
    TypeDescriptor,
    TypeReference,
)
from .plugin import (
    BuildContext,
    CodeGenerator,
    ConfigMutator,
    Plugin,
    PluginPipeline,
    SchemaMutator,
    SourceInjector,
)
from .printer import print_schema
from .scalars import (
    DateHandler,
    DateTimeHandler,
    JSONHandler,
    ScalarHandler,
    ScalarRegistry,
    UUIDHandler,
)
from .templates import Renderer

__all__ = [
    # Config
    "Config",
    "PackageConfig",
    "SchemaSource",
    "TypeMapEntry",
    "TypeMapField",
    "find_config",
    "load_config",
    # Errors
    "GenerationError",
    "SchemaLoadError",
    "ConfigValidationError",
    "AutobindError",
    "DirectiveBuildError",
    "TypeBuildError",
    "MissingQueryRootError",
    "UnsupportedKeyError",
    "RenderError",
    "FederationError",
    "EntityTypeMismatchError",
    "UnknownEntityTypeError",
    "IntrospectionDisabledError",
    # IR types
    "AppliedDirective",
    "Argument",
    "Data",
    "Directive",
    "Entity",
    "Field",
    "Interface",
    "Object",
    "Objects",
    "TypeDescriptor",
    "TypeReference",
    # Builder
    "build_data",
    "print_schema",
    # Plugins
    "Plugin",
    "ConfigMutator",
    "SourceInjector",
    "SchemaMutator",
    "CodeGenerator",
    "BuildContext",
    "PluginPipeline",
    # Scalars
    "ScalarHandler",
    "ScalarRegistry",
    "DateTimeHandler",
    "DateHandler",
    "UUIDHandler",
    "JSONHandler",
    # Rendering
    "Renderer",
]

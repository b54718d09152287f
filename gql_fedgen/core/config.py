"""Generator configuration.

The configuration lives in a ``gqlgen.yml`` style YAML file and is validated
with pydantic. Besides the settings read from the file, a Config carries the
schema sources for the current run: the user's schema files and any
additional sources injected by plugins.
"""

from __future__ import annotations

import glob
import importlib
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Any

import yaml
from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    Source,
    build_ast_schema,
    is_introspection_type,
    is_specified_scalar_type,
    parse,
)
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import AutobindError, ConfigValidationError, SchemaLoadError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".gqlgen.yml", "gqlgen.yml", "gqlgen.yaml")
SCHEMA_SUFFIXES = (".graphql", ".graphqls")

BUILTIN_MODELS = {
    "String": "builtins.str",
    "Int": "builtins.int",
    "Float": "builtins.float",
    "Boolean": "builtins.bool",
    "ID": "builtins.str",
    "__Schema": "graphql.GraphQLSchema",
    "__Type": "graphql.GraphQLNamedType",
    "__Field": "graphql.GraphQLField",
    "__InputValue": "graphql.GraphQLArgument",
    "__EnumValue": "graphql.GraphQLEnumValue",
    "__Directive": "graphql.GraphQLDirective",
    "__TypeKind": "graphql.TypeKind",
    "__DirectiveLocation": "graphql.DirectiveLocation",
}


def _string_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    return value


class SchemaSource(BaseModel):
    """A named piece of schema text."""

    name: str
    body: str
    builtin: bool = False


class PackageConfig(BaseModel):
    """Where a generated module is written and how it is imported."""

    model_config = ConfigDict(extra="forbid")

    filename: str
    package: str = ""

    @model_validator(mode="after")
    def derive_package(self) -> PackageConfig:
        if not self.package:
            path = PurePosixPath(self.filename.replace("\\", "/")).with_suffix("")
            self.package = ".".join(part for part in path.parts if part not in ("", "/"))
        return self


class TypeMapField(BaseModel):
    model_config = ConfigDict(extra="forbid")

    resolver: bool = False
    field_name: str | None = None


class TypeMapEntry(BaseModel):
    """Binding of one schema type to existing Python types."""

    model_config = ConfigDict(extra="forbid")

    model: list[str] = Field(default_factory=list)
    fields: dict[str, TypeMapField] = Field(default_factory=dict)

    @field_validator("model", mode="before")
    @classmethod
    def coerce_model(cls, value: Any) -> Any:
        return _string_list(value)


class Config(BaseModel):
    """Configuration for a generation run."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    schema_filename: list[str] = Field(default_factory=lambda: ["schema.graphql"], alias="schema")
    model: PackageConfig = Field(default_factory=lambda: PackageConfig(filename="generated/models.py"))
    federation: PackageConfig = Field(
        default_factory=lambda: PackageConfig(filename="generated/service.py")
    )
    federated: bool = False
    autobind: list[str] = Field(default_factory=list)
    models: dict[str, TypeMapEntry] = Field(default_factory=dict)

    # Run state, not read from the config file
    base_dir: Path = Field(default_factory=lambda: Path("."), exclude=True)
    additional_sources: list[SchemaSource] = Field(default_factory=list, exclude=True)
    sources: list[SchemaSource] = Field(default_factory=list, exclude=True)

    @field_validator("schema_filename", "autobind", mode="before")
    @classmethod
    def coerce_lists(cls, value: Any) -> Any:
        return _string_list(value)

    @property
    def builtin_source_names(self) -> set[str]:
        return {s.name for s in self.additional_sources if s.builtin}

    def resolve_path(self, filename: str) -> Path:
        """Return ``filename`` relative to the config's directory."""
        return self.base_dir / filename

    def _schema_files(self) -> list[Path]:
        files: list[Path] = []
        for entry in self.schema_filename:
            path = self.resolve_path(entry)
            if glob.has_magic(entry):
                matches = sorted(glob.glob(str(path), recursive=True))
                if not matches:
                    raise SchemaLoadError("no schema files match", entry)
                files.extend(Path(m) for m in matches)
            elif path.is_dir():
                for root, dirs, filenames in os.walk(path):
                    dirs.sort()
                    for filename in sorted(filenames):
                        if filename.endswith(SCHEMA_SUFFIXES):
                            files.append(Path(root) / filename)
            else:
                files.append(path)
        return list(dict.fromkeys(files))

    def read_sources(self):
        """Read the user's schema files into ``sources``."""
        self.sources = []
        for path in self._schema_files():
            try:
                name = path.relative_to(self.base_dir).as_posix()
            except ValueError:
                name = path.as_posix()
            try:
                with open(path, encoding="utf-8") as f:
                    body = f.read()
            except OSError as e:
                raise SchemaLoadError(f"unable to open schema: {e.strerror or e}", name) from e
            self.sources.append(SchemaSource(name=name, body=body))
            logger.debug("Read schema source %s (%d bytes)", name, len(body))

    def load_schema(self) -> GraphQLSchema:
        """Parse additional sources followed by user sources into one schema."""
        definitions = []
        for source in [*self.additional_sources, *self.sources]:
            try:
                document = parse(Source(source.body, source.name))
            except GraphQLError as e:
                logger.debug("Parse failure in %s", source.name)
                raise SchemaLoadError(e.message, source.name) from e
            definitions.extend(document.definitions)

        try:
            return build_ast_schema(DocumentNode(definitions=tuple(definitions)))
        except (GraphQLError, TypeError) as e:
            raise SchemaLoadError(str(e)) from e

    def check(self):
        """Validate settings that pydantic cannot check on its own."""
        for key, pkg in (("model", self.model), ("federation", self.federation)):
            if not pkg.filename.endswith(".py"):
                raise ConfigValidationError(f"{key}.filename must end in .py: {pkg.filename}")
        if self.resolve_path(self.model.filename) == self.resolve_path(self.federation.filename):
            raise ConfigValidationError("model.filename and federation.filename must differ")
        for type_name, entry in self.models.items():
            for path in entry.model:
                if "." not in path.strip("."):
                    raise ConfigValidationError(
                        f"models.{type_name}: {path!r} must be a dotted path like 'package.module.Name'"
                    )

    def apply_autobind(self, schema: GraphQLSchema):
        """Bind schema types to same-named classes in the autobind modules."""
        for module_name in self.autobind:
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                raise AutobindError(f"unable to load {module_name}: {e}") from e
            for name, type_def in schema.type_map.items():
                if name in self.models or is_introspection_type(type_def) or is_specified_scalar_type(type_def):
                    continue
                candidate = getattr(module, name, None)
                if isinstance(candidate, type):
                    self.models[name] = TypeMapEntry(model=[f"{module_name}.{name}"])
                    logger.debug("Autobound %s to %s.%s", name, module_name, name)

    def inject_builtins(self):
        """Bind GraphQL's builtin scalars and introspection types."""
        for name, path in BUILTIN_MODELS.items():
            if name not in self.models:
                self.models[name] = TypeMapEntry(model=[path])


def load_config(path: str | Path) -> Config:
    """Load and validate a YAML config file."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigValidationError(f"unable to read config {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"{path}: invalid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigValidationError(f"{path}: expected a mapping at the top level")

    try:
        config = Config.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"{path}: {e}") from e

    config.base_dir = path.resolve().parent
    return config


def find_config(start: str | Path = ".") -> Path:
    """Search ``start`` and its parents for a config file."""
    directory = Path(start).resolve()
    for candidate_dir in (directory, *directory.parents):
        for filename in CONFIG_FILENAMES:
            candidate = candidate_dir / filename
            if candidate.is_file():
                return candidate
    raise ConfigValidationError(f"unable to find a config file ({', '.join(CONFIG_FILENAMES)}) from {directory}")

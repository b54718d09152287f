"""Pydantic model generation.

Renders the schema's enums, objects and inputs into a models module. Types
bound to existing Python classes in the config are imported, not generated.
"""

import logging
from dataclasses import dataclass, field

from graphql import is_enum_type, is_introspection_type

from ..core.config import Config
from ..core.ir import Data, Object, TypeDescriptor, TypeReference
from ..core.templates import Renderer, safe_param_name, snake_case

logger = logging.getLogger(__name__)


@dataclass
class ModelField:
    python_name: str
    alias: str | None
    annotation: str
    nullable: bool
    description: str | None = None


@dataclass
class Model:
    name: str
    fields: list[ModelField] = field(default_factory=list)
    description: str | None = None
    is_input: bool = False


@dataclass
class EnumModel:
    name: str
    values: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class UnionAlias:
    name: str
    members: list[str] = field(default_factory=list)


def python_field_name(name: str) -> str:
    """Attribute name for a schema field: snake_case, no leading underscore, not a keyword."""
    python_name = snake_case(name).lstrip("_") or "field"
    return safe_param_name(python_name)


def is_bound(config: Config, type_name: str) -> bool:
    entry = config.models.get(type_name)
    return entry is not None and bool(entry.model)


class ModelGenPlugin:
    """Generates pydantic models for every unbound, non-root schema type."""

    def name(self) -> str:
        return "modelgen"

    def generate_code(self, data: Data, renderer: Renderer) -> None:
        config = data.config
        local_package = config.model.package
        imports: set[tuple[str, str]] = set()

        def annotate(ref: TypeReference) -> str:
            if ref.target.module and ref.target.module != local_package:
                imports.add((ref.target.module, ref.target.name))
            return ref.annotation()

        def describe(type_name: str) -> str:
            if is_bound(config, type_name):
                target = TypeDescriptor.from_path(config.models[type_name].model[0])
                if target.module:
                    imports.add((target.module, target.name))
                return target.name
            return type_name

        enums = [
            EnumModel(name=type_def.name, values=list(type_def.values), description=type_def.description)
            for name, type_def in sorted(data.schema.type_map.items())
            if is_enum_type(type_def) and not is_introspection_type(type_def) and not is_bound(config, name)
        ]

        models = [
            self._model(obj, annotate)
            for obj in [*data.objects, *data.inputs]
            if not obj.root and not obj.name.startswith("__") and not is_bound(config, obj.name)
        ]

        unions = [
            UnionAlias(name=name, members=[describe(t) for t in interface.possible_types])
            for name, interface in sorted(data.interfaces.items())
            if not is_bound(config, name)
        ]

        renderer.render(
            "models.py.j2",
            package_name=local_package,
            filename=config.resolve_path(config.model.filename),
            data={
                "enums": enums,
                "models": models,
                "unions": unions,
                "imports": sorted(imports),
            },
        )
        logger.debug("Generated %d models, %d enums, %d unions", len(models), len(enums), len(unions))

    def _model(self, obj: Object, annotate) -> Model:
        model = Model(name=obj.name, description=obj.description, is_input=obj.is_input)
        for f in obj.fields:
            if f.name.startswith("__"):
                continue
            python_name = python_field_name(f.name)
            model.fields.append(
                ModelField(
                    python_name=python_name,
                    alias=f.name if python_name != f.name else None,
                    annotation=annotate(f.type_reference),
                    nullable=f.type_reference.nullable,
                    description=f.description,
                )
            )
        return model

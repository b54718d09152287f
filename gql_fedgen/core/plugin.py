"""Plugin capabilities and the generation pipeline.

A plugin implements any subset of the capability protocols below. The
pipeline calls only the hooks a plugin implements, in registration order:

    mutate_config -> read sources -> inject_sources -> load schema
    -> mutate_schema -> build IR -> generate_code

Example usage:
    from gql_fedgen.core.plugin import PluginPipeline

    class AddScalars:
        def name(self):
            return "scalars"

        def inject_sources(self, config):
            config.additional_sources.append(
                SchemaSource(name="scalars.graphql", body="scalar Time", builtin=True)
            )

    PluginPipeline([AddScalars()]).run(config, Renderer())
"""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from graphql import GraphQLSchema

from .builder import build_data
from .config import Config
from .ir import Data
from .templates import Renderer

logger = logging.getLogger(__name__)


@runtime_checkable
class Plugin(Protocol):
    """Every plugin has a name, used in logs and to reject duplicates."""

    def name(self) -> str:
        ...


@runtime_checkable
class ConfigMutator(Protocol):
    """Protocol for plugins that adjust the configuration before schema load."""

    def mutate_config(self, config: Config) -> None:
        """Called first, before any schema source is read.

        Args:
            config: The run configuration, mutated in place
        """
        ...


@runtime_checkable
class SourceInjector(Protocol):
    """Protocol for plugins that add schema text to the parse input.

    Example:
        class AddDirectives(SourceInjector):
            def inject_sources(self, config: Config) -> None:
                config.additional_sources.append(
                    SchemaSource(name="directives.graphql", body="directive @internal on FIELD_DEFINITION")
                )
    """

    def inject_sources(self, config: Config) -> None:
        """Called after the user's sources are read and before the schema is built.

        Args:
            config: The run configuration; append to ``additional_sources``
        """
        ...


@runtime_checkable
class SchemaMutator(Protocol):
    """Protocol for plugins that rewrite the parsed schema graph."""

    def mutate_schema(self, schema: GraphQLSchema) -> None:
        """Called once the schema is built and before the IR is.

        Args:
            schema: The schema graph, mutated in place
        """
        ...


@runtime_checkable
class CodeGenerator(Protocol):
    """Protocol for plugins that emit code from the finished IR.

    The schema graph must not be changed at this stage.
    """

    def generate_code(self, data: Data, renderer: Renderer) -> None:
        """Called last.

        Args:
            data: The built IR
            renderer: Renderer shared by every generator in the run
        """
        ...


@dataclass
class BuildContext:
    """State threaded through one pipeline run."""
    config: Config
    renderer: Renderer
    schema: GraphQLSchema | None = None
    data: Data | None = None


def plugin_name(plugin) -> str:
    if isinstance(plugin, Plugin):
        return plugin.name()
    return type(plugin).__name__


class PluginPipeline:
    """Runs plugins through the stages of one generation run."""

    def __init__(self, plugins=None):
        self.plugins: list = []
        self.context: BuildContext | None = None
        for plugin in plugins or ():
            self.add(plugin)

    def add(self, plugin):
        """Register a plugin.

        Raises:
            ValueError: if the plugin, or one with the same name, is already registered
        """
        name = plugin_name(plugin)
        for registered in self.plugins:
            if registered is plugin or plugin_name(registered) == name:
                raise ValueError(f"plugin {name!r} is already registered")
        self.plugins.append(plugin)

    def _each(self, capability: type, hook: str):
        for plugin in self.plugins:
            if isinstance(plugin, capability):
                logger.debug("Running %s.%s", plugin_name(plugin), hook)
                yield plugin

    def run(self, config: Config, renderer: Renderer | None = None, emit: bool = True) -> Data:
        """Run every stage once and return the built IR.

        Hooks see a deep copy of ``config``, so the caller's config is left
        as it was and can be run again. The first exception from any stage or
        hook aborts the run. With ``emit=False`` the run stops after the IR is
        built and no code is generated.

        Raises:
            RuntimeError: if this pipeline has already been run
        """
        if self.context is not None:
            raise RuntimeError("a plugin pipeline can only be run once")
        ctx = self.context = BuildContext(config=config.model_copy(deep=True), renderer=renderer or Renderer())

        for plugin in self._each(ConfigMutator, "mutate_config"):
            plugin.mutate_config(ctx.config)

        ctx.config.read_sources()
        for plugin in self._each(SourceInjector, "inject_sources"):
            plugin.inject_sources(ctx.config)

        ctx.schema = ctx.config.load_schema()
        for plugin in self._each(SchemaMutator, "mutate_schema"):
            plugin.mutate_schema(ctx.schema)

        ctx.data = build_data(ctx.config, ctx.schema)
        if not emit:
            return ctx.data
        for plugin in self._each(CodeGenerator, "generate_code"):
            plugin.generate_code(ctx.data, ctx.renderer)

        return ctx.data

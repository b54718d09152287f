"""Tests for plugin capabilities and the pipeline driver."""

import pytest
from graphql import GraphQLField, GraphQLString

from gql_fedgen.api import build, default_plugins, generate
from gql_fedgen.core.config import SchemaSource
from gql_fedgen.core.plugin import (
    CodeGenerator,
    ConfigMutator,
    PluginPipeline,
    SchemaMutator,
    SourceInjector,
)
from gql_fedgen.plugins.federation import FederationPlugin
from gql_fedgen.plugins.modelgen import ModelGenPlugin

SCHEMA = "type Query { hello: String }\n"


class Recorder:
    """Plugin implementing every hook and recording the calls."""

    def __init__(self, name, calls):
        self._name = name
        self.calls = calls

    def name(self):
        return self._name

    def mutate_config(self, config):
        self.calls.append((self._name, "mutate_config"))

    def inject_sources(self, config):
        self.calls.append((self._name, "inject_sources"))

    def mutate_schema(self, schema):
        self.calls.append((self._name, "mutate_schema"))

    def generate_code(self, data, renderer):
        self.calls.append((self._name, "generate_code"))


class SchemaOnly:
    def __init__(self, calls):
        self.calls = calls

    def name(self):
        return "schema-only"

    def mutate_schema(self, schema):
        self.calls.append(("schema-only", "mutate_schema"))
        schema.query_type.fields["extra"] = GraphQLField(GraphQLString)


class Failing:
    def name(self):
        return "failing"

    def mutate_schema(self, schema):
        raise RuntimeError("boom")


class TestCapabilities:
    """Tests for capability detection."""

    def test_full_plugin(self):
        plugin = Recorder("r", [])
        for capability in (ConfigMutator, SourceInjector, SchemaMutator, CodeGenerator):
            assert isinstance(plugin, capability)

    def test_partial_plugin(self):
        plugin = SchemaOnly([])
        assert isinstance(plugin, SchemaMutator)
        assert not isinstance(plugin, ConfigMutator)
        assert not isinstance(plugin, SourceInjector)
        assert not isinstance(plugin, CodeGenerator)

    def test_bundled_plugins(self):
        assert isinstance(FederationPlugin(), ConfigMutator)
        assert isinstance(FederationPlugin(), CodeGenerator)
        assert isinstance(ModelGenPlugin(), CodeGenerator)
        assert not isinstance(ModelGenPlugin(), SchemaMutator)


class TestPluginPipeline:
    """Tests for PluginPipeline."""

    def test_hook_order(self, make_config):
        calls = []
        pipeline = PluginPipeline([Recorder("a", calls), Recorder("b", calls)])
        pipeline.run(make_config(SCHEMA))

        assert calls == [
            ("a", "mutate_config"),
            ("b", "mutate_config"),
            ("a", "inject_sources"),
            ("b", "inject_sources"),
            ("a", "mutate_schema"),
            ("b", "mutate_schema"),
            ("a", "generate_code"),
            ("b", "generate_code"),
        ]

    def test_only_implemented_hooks_run(self, make_config):
        calls = []
        PluginPipeline([SchemaOnly(calls)]).run(make_config(SCHEMA))
        assert calls == [("schema-only", "mutate_schema")]

    def test_schema_mutations_reach_ir(self, make_config):
        data = PluginPipeline([SchemaOnly([])]).run(make_config(SCHEMA))
        assert data.query_root.field_by_name("extra") is not None
        assert "extra: String" in data.sdl

    def test_first_error_aborts(self, make_config):
        calls = []
        pipeline = PluginPipeline([Failing(), Recorder("after", calls)])
        with pytest.raises(RuntimeError, match="boom"):
            pipeline.run(make_config(SCHEMA))
        assert ("after", "mutate_schema") not in calls
        assert ("after", "generate_code") not in calls
        assert pipeline.context.data is None

    def test_rejects_duplicate_plugins(self):
        plugin = Recorder("a", [])
        pipeline = PluginPipeline([plugin])
        with pytest.raises(ValueError, match="already registered"):
            pipeline.add(plugin)
        with pytest.raises(ValueError, match="already registered"):
            pipeline.add(Recorder("a", []))

    def test_runs_once(self, make_config):
        pipeline = PluginPipeline([])
        pipeline.run(make_config(SCHEMA))
        with pytest.raises(RuntimeError, match="only be run once"):
            pipeline.run(make_config(SCHEMA))

    def test_emit_false_skips_code_generation(self, make_config):
        calls = []
        PluginPipeline([Recorder("a", calls)]).run(make_config(SCHEMA), emit=False)
        assert ("a", "generate_code") not in calls
        assert ("a", "mutate_schema") in calls

    def test_sources_read_before_injection(self, make_config):
        seen = []

        class Injector:
            def name(self):
                return "injector"

            def inject_sources(self, config):
                seen.extend(s.name for s in config.sources)
                config.additional_sources.append(
                    SchemaSource(name="extra.graphql", body="type Extra { id: ID }", builtin=True)
                )

        data = PluginPipeline([Injector()]).run(make_config(SCHEMA))
        assert seen == ["schema.graphql"]
        assert data.objects.by_name("Extra") is not None


class TestApi:
    """Tests for the api entry points."""

    def test_default_plugins(self, make_config):
        assert [type(p) for p in default_plugins(make_config(SCHEMA))] == [ModelGenPlugin]
        federated = default_plugins(make_config(SCHEMA, federated=True))
        assert [type(p) for p in federated] == [FederationPlugin, ModelGenPlugin]

    def test_generate_writes_models(self, make_config, tmp_path):
        generate(make_config(SCHEMA))
        assert (tmp_path / "generated" / "models.py").is_file()
        assert not (tmp_path / "generated" / "service.py").exists()

    def test_build_writes_nothing(self, make_config, tmp_path):
        data = build(make_config(SCHEMA))
        assert data.query_root.name == "Query"
        assert not (tmp_path / "generated").exists()

    def test_same_config_runs_twice(self, make_config, products_schema):
        config = make_config(products_schema, federated=True)
        first = build(config)
        second = build(config)

        assert first.sdl == second.sdl
        assert [e.resolver_name for e in first.entities] == [e.resolver_name for e in second.entities]
        assert [f.name for f in first.query_root.fields] == [f.name for f in second.query_root.fields]

    def test_run_leaves_caller_config_untouched(self, make_config, products_schema):
        config = make_config(products_schema, federated=True)
        data = generate(config)

        assert config.models == {}
        assert config.additional_sources == []
        assert config.sources == []
        assert data.config is not config
        assert "_Service" in data.config.models

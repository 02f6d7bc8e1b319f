"""Tests for the plugin loader and the built-in processors."""

from __future__ import annotations

import pytest

from assetforge.core.registry import wrap_processor
from assetforge.models.processing import ProcessorInput
from assetforge.plugins import PluginLoadError, load_plugins, resolve_entry_point
from assetforge.processors import charset_normalizer, register_defaults, safety_colons


def envelope_for(data: str, content_type: str = "application/javascript") -> ProcessorInput:
    return ProcessorInput(
        environment=None,
        cache=None,
        filename="/assets/app.js",
        root_path="/assets",
        logical_path="app",
        content_type=content_type,
        data=data,
    )


def register_upcase(environment):
    environment.register_postprocessor("text/css", "upcase", lambda ctx, data: data.upper())


NOT_CALLABLE = 42


class TestResolveEntryPoint:
    def test_resolves_function(self):
        assert resolve_entry_point("assetforge.processors:register_defaults") is register_defaults

    def test_resolves_dotted_attribute(self):
        target = resolve_entry_point("assetforge.core.registry:ProcessorRegistry.snapshot")
        assert callable(target)

    @pytest.mark.parametrize("entry_point", ["no_colon", ":attr", "module:"])
    def test_malformed(self, entry_point):
        with pytest.raises(PluginLoadError, match="must look like"):
            resolve_entry_point(entry_point)

    def test_missing_module(self):
        with pytest.raises(PluginLoadError, match="Cannot import"):
            resolve_entry_point("assetforge_missing_module:register")

    def test_missing_attribute(self):
        with pytest.raises(PluginLoadError, match="no attribute"):
            resolve_entry_point("assetforge.processors:nope")

    def test_not_callable(self):
        with pytest.raises(PluginLoadError, match="not callable"):
            resolve_entry_point(f"{__name__}:NOT_CALLABLE")

    def test_is_an_import_error(self):
        assert issubclass(PluginLoadError, ImportError)


class TestLoadPlugins:
    def test_calls_each_in_order(self, environment):
        loaded = load_plugins(
            environment,
            ["assetforge.processors:register_defaults", f"{__name__}:register_upcase"],
        )
        assert loaded == ["assetforge.processors:register_defaults", f"{__name__}:register_upcase"]
        assert [e.func for e in environment.postprocessors("application/javascript")] == [safety_colons]
        assert environment.postprocessors("text/css")[0].label == "upcase"

    def test_empty(self, environment):
        assert load_plugins(environment, []) == []

    def test_failure_propagates(self, environment):
        with pytest.raises(PluginLoadError):
            load_plugins(environment, ["assetforge.processors:nope"])


class TestSafetyColons:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ("var a = 1", "var a = 1;\n"),
            ("var a = 1;", "var a = 1;"),
            ("var a = 1;\n\n", "var a = 1;\n\n"),
            ("", ""),
            ("  \n", "  \n"),
        ],
    )
    def test_terminates_scripts(self, data, expected):
        assert safety_colons(envelope_for(data)) == expected

    def test_bundled_scripts_stay_separate(self, environment, write_asset):
        register_defaults(environment)
        write_asset("a.js", "var a = 1")
        asset = environment.find_asset("a.js")
        assert asset.source == "var a = 1;\n"


class TestCharsetNormalizer:
    def test_hoists_first_charset(self):
        data = '@charset "UTF-8";\na {}\n@charset "ISO-8859-1";\nb {}\n'
        assert charset_normalizer(envelope_for(data, "text/css")) == '@charset "UTF-8";\n\na {}\n\nb {}\n'

    def test_no_charset_unchanged(self):
        assert charset_normalizer(envelope_for("a {}\n", "text/css")) == "a {}\n"

    def test_is_wrappable(self):
        assert wrap_processor(charset_normalizer).func is charset_normalizer

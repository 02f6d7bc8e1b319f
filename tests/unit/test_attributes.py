"""Tests for filename-derived asset attributes."""

from __future__ import annotations

import os

import pytest

from assetforge.core.environment import Environment
from assetforge.errors import FileOutsidePathsError


def passthrough(envelope):
    return envelope.data


def coffee(envelope):
    return envelope.data


def erb(envelope):
    return envelope.data


@pytest.fixture
def engines_environment(environment: Environment) -> Environment:
    environment.register_engine(".coffee", coffee, mime_type="application/javascript")
    environment.register_engine(".jst", passthrough, mime_type="application/javascript")
    environment.register_engine(".erb", erb)
    return environment


def attrs(environment, name):
    return environment.attributes_for(os.path.join(environment.paths[0], name))


class TestExtensions:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("empty", []),
            ("gallery.js", [".js"]),
            ("application.js.coffee", [".js", ".coffee"]),
            ("project.js.coffee.erb", [".js", ".coffee", ".erb"]),
            ("gallery.css.erb", [".css", ".erb"]),
        ],
    )
    def test_extensions(self, engines_environment, name, expected):
        assert attrs(engines_environment, name).extensions == expected

    def test_directories_do_not_contribute(self, engines_environment):
        filename = os.path.join(engines_environment.paths[0], "v1.2", "app")
        assert engines_environment.attributes_for(filename).extensions == []


class TestFormatExtension:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("empty", None),
            ("gallery.js", ".js"),
            ("application.js.coffee", ".js"),
            ("project.js.coffee.erb", ".js"),
            ("gallery.css.erb", ".css"),
            ("gallery.erb", None),
            ("gallery.foo", None),
            ("jquery.js", ".js"),
            ("jquery.min.js", ".js"),
            ("jquery.tmpl.js", ".js"),
            ("jquery.tmpl.min.js", ".js"),
            ("jquery.csv.js", ".js"),
            ("jquery.csv.min.js", ".js"),
        ],
    )
    def test_format_extension(self, engines_environment, name, expected):
        assert attrs(engines_environment, name).format_extension == expected

    def test_engines_are_never_format_extensions(self, engines_environment):
        engines_environment.register_engine(".ms", passthrough)
        assert attrs(engines_environment, "foo.jst.ms").format_extension is None


class TestEngineExtensions:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("empty", []),
            ("gallery.js", []),
            ("application.js.coffee", [".coffee"]),
            ("project.js.coffee.erb", [".coffee", ".erb"]),
            ("gallery.css.erb", [".erb"]),
            ("gallery.erb", [".erb"]),
            ("jquery.js", []),
            ("jquery.min.js", []),
            ("jquery.tmpl.min.js", []),
            ("jquery.js.erb", [".erb"]),
            ("jquery.min.js.erb", [".erb"]),
            ("jquery.min.coffee", [".coffee"]),
            ("jquery.csv.min.js.erb", [".erb"]),
            ("jquery.csv.min.js.coffee.erb", [".coffee", ".erb"]),
        ],
    )
    def test_engine_extensions(self, engines_environment, name, expected):
        assert attrs(engines_environment, name).engine_extensions == expected

    def test_stacked_engines_without_format(self, engines_environment):
        engines_environment.register_engine(".ms", passthrough)
        assert attrs(engines_environment, "foo.jst.ms").engine_extensions == [".jst", ".ms"]


class TestContentType:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("empty", "application/octet-stream"),
            ("gallery.js", "application/javascript"),
            ("application.js.coffee", "application/javascript"),
            ("project.js.coffee.erb", "application/javascript"),
            ("gallery.css.erb", "text/css"),
            ("jquery.tmpl.min.js", "application/javascript"),
            ("application.coffee", "application/javascript"),
            ("gallery.erb", "application/octet-stream"),
        ],
    )
    def test_content_type(self, engines_environment, name, expected):
        assert attrs(engines_environment, name).content_type == expected

    def test_innermost_engine_decides(self, environment):
        environment.register_engine(".haml", passthrough, mime_type="text/html")
        environment.register_engine(".ngt", passthrough, mime_type="application/javascript")
        assert attrs(environment, "foo.ngt.haml").content_type == "application/javascript"

    def test_registered_mime_type(self, environment):
        environment.register_mime_type("text/x-less", ".less")
        assert attrs(environment, "theme.less").content_type == "text/x-less"
        assert environment.extension_for_mime_type("text/x-less") == ".less"


class TestLogicalPath:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("gallery.js", "gallery.js"),
            ("application.js.coffee", "application.js"),
            ("application.coffee", "application.js"),
            ("lib/gallery.css.erb", "lib/gallery.css"),
            ("project.js.coffee.erb", "project.js"),
            ("jquery.tmpl.min.js", "jquery.tmpl.min.js"),
            ("gallery.erb", "gallery"),
        ],
    )
    def test_logical_path(self, engines_environment, name, expected):
        assert attrs(engines_environment, name).logical_path == expected

    def test_relative_to_containing_search_path(self, engines_environment, tmp_dir):
        engines_environment.append_path("vendor")
        filename = os.path.join(str(tmp_dir), "vendor", "jquery.js")
        assert engines_environment.attributes_for(filename).logical_path == "jquery.js"

    def test_outside_paths(self, engines_environment, tmp_dir):
        filename = os.path.join(str(tmp_dir), "elsewhere", "app.js")
        with pytest.raises(FileOutsidePathsError, match="isn't in paths"):
            engines_environment.attributes_for(filename).logical_path


class TestProcessorOrder:
    def test_pre_engines_reversed_post(self, engines_environment):
        def pre(envelope):
            return envelope.data

        def post(envelope):
            return envelope.data

        engines_environment.register_preprocessor("application/javascript", pre)
        engines_environment.register_postprocessor("application/javascript", post)

        names = [e.name for e in attrs(engines_environment, "project.js.coffee.erb").processors]
        assert len(names) == 4
        assert names[0].endswith(".pre")
        assert names[1].endswith(".erb")
        assert names[2].endswith(".coffee")
        assert names[3].endswith(".post")

    def test_static_file_has_no_processors(self, environment):
        assert attrs(environment, "logo.png").processors == []

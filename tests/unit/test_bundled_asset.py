"""Tests for bundled assets — concatenation, stubs, bundle processors, cycles."""

from __future__ import annotations

import pytest

from assetforge.core.bundled_asset import BundledAsset
from assetforge.core.hasher import bytes_hexdigest
from assetforge.errors import AssetError, CircularDependencyError
from assetforge.processors import charset_normalizer


class TestConcatenation:
    def test_required_bodies_are_joined(self, js_environment, write_asset):
        write_asset("project.js", "//= require foo.js\nbar")
        write_asset("foo.js", "foo")
        asset = js_environment.find_asset("project.js")
        assert isinstance(asset, BundledAsset)
        assert asset.source == "foobar"
        assert asset.length == 6
        assert asset.digest == bytes_hexdigest(b"foobar")
        assert asset.to_bytes() == b"foobar"

    def test_inherits_processed_metadata(self, js_environment, write_asset):
        write_asset("project.js", "//= require foo.js\nbar")
        write_asset("foo.js", "foo")
        bundled = js_environment.find_asset("project.js")
        processed = bundled.processed_asset
        assert processed.source == "bar"
        assert bundled.mtime == processed.mtime
        assert bundled.dependency_paths == processed.dependency_paths
        assert bundled.dependency_digest == processed.dependency_digest
        assert bundled.content_type == processed.content_type

    def test_to_a_expands_parts(self, js_environment, write_asset):
        project = write_asset("project.js", "//= require foo.js\nbar")
        foo = write_asset("foo.js", "foo")
        parts = js_environment.find_asset("project.js").to_a()
        assert [p.filename for p in parts] == [foo, project]
        assert [p.source for p in parts] == ["foo", "bar"]

    def test_shared_requirement_included_once(self, js_environment, write_asset):
        write_asset("app.js", "//= require a.js\n//= require b.js\napp\n")
        write_asset("a.js", "//= require shared.js\na\n")
        write_asset("b.js", "//= require shared.js\nb\n")
        write_asset("shared.js", "shared\n")
        asset = js_environment.find_asset("app.js")
        assert asset.source == "shared\na\nb\napp\n"


class TestStubs:
    def test_stubbed_asset_is_excluded(self, js_environment, write_asset):
        write_asset("app.js", "//= require a.js\n//= require b.js\n//= stub b.js\napp\n")
        write_asset("a.js", "a\n")
        write_asset("b.js", "b\n")
        assert js_environment.find_asset("app.js").source == "a\napp\n"

    def test_stub_excludes_the_closure(self, js_environment, write_asset):
        write_asset("app.js", "//= require a.js\n//= require b.js\n//= stub b.js\napp\n")
        write_asset("a.js", "a\n")
        write_asset("b.js", "//= require c.js\nb\n")
        write_asset("c.js", "c\n")
        assert js_environment.find_asset("app.js").source == "a\napp\n"

    def test_stub_without_require(self, js_environment, write_asset):
        write_asset("app.js", "//= stub vendor.js\napp\n")
        write_asset("vendor.js", "vendor\n")
        assert js_environment.find_asset("app.js").source == "app\n"


class TestBinaryParts:
    def test_non_text_part_names_the_file(self, js_environment, write_asset, assets_dir):
        write_asset("app.js", "//= require logo.png\napp\n")
        (assets_dir / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")
        with pytest.raises(AssetError, match="logo.png is not UTF-8 text"):
            js_environment.find_asset("app.js")


class TestBundleProcessors:
    def test_bundle_processor_runs_on_concatenation(self, js_environment, write_asset):
        write_asset("site.css", '//= require reset.css\n@charset "UTF-8";\nbody {}\n')
        write_asset("reset.css", '@charset "UTF-8";\n* {}\n')
        js_environment.register_bundle_processor("text/css", charset_normalizer)
        asset = js_environment.find_asset("site.css")
        assert asset.source == '@charset "UTF-8";\n\n* {}\n\nbody {}\n'
        assert asset.source.count("@charset") == 1

    def test_bundle_processors_do_not_touch_parts(self, js_environment, write_asset):
        write_asset("app.js", "//= require a.js\napp")
        write_asset("a.js", "a")
        js_environment.register_bundle_processor(
            "application/javascript", "wrap", lambda ctx, data: f"({data})"
        )
        asset = js_environment.find_asset("app.js")
        assert asset.source == "(aapp)"
        assert asset.processed_asset.source == "app"


class TestCircularDependencies:
    def test_mutual_requirement(self, js_environment, write_asset):
        write_asset("a.js", "//= require b.js\na\n")
        write_asset("b.js", "//= require a.js\nb\n")
        with pytest.raises(CircularDependencyError, match="already been required"):
            js_environment.find_asset("a.js")

    def test_self_requirement_is_not_circular(self, js_environment, write_asset):
        write_asset("a.js", "//= require a.js\na\n")
        assert js_environment.find_asset("a.js").source == "a\n"

"""Shared test fixtures for assetforge."""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

import pytest

from assetforge.cache.file_store import FileStore
from assetforge.core.environment import Environment
from assetforge.models.processing import ProcessorInput, StructuredUpdate

_REQUIRE_RE = re.compile(r"^//= (require|stub|depend_on) (\S+)\n?", re.MULTILINE)


def directive_processor(envelope: ProcessorInput) -> StructuredUpdate:
    """Minimal stand-in for a directive parser.

    ``//= require NAME`` and ``//= stub NAME`` lines are resolved against the
    environment and stripped; ``//= depend_on NAME`` records a watched file.
    """
    environment = envelope.environment
    required: list[str] = []
    stubbed: list[str] = []
    depended: list[str] = []

    def collect(match: re.Match[str]) -> str:
        directive, name = match.group(1), match.group(2)
        filename = environment.resolve(name)
        assert filename is not None, f"unresolvable directive target {name}"
        {"require": required, "stub": stubbed, "depend_on": depended}[directive].append(filename)
        return ""

    data = _REQUIRE_RE.sub(collect, envelope.data)
    return StructuredUpdate(
        data=data,
        required_paths=required,
        stubbed_assets=stubbed,
        dependency_paths=depended,
    )


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def assets_dir(tmp_dir: Path) -> Path:
    """The single search path used by most tests."""
    path = tmp_dir / "assets"
    path.mkdir()
    return path


@pytest.fixture
def write_asset(assets_dir: Path) -> Callable[[str, str], str]:
    """Factory fixture: write a source file under the search path, return its filename."""

    def _write(relative: str, content: str) -> str:
        path = assets_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def cache_store(tmp_dir: Path) -> FileStore:
    """Provide a persisted cache tier in a temp directory."""
    return FileStore(tmp_dir / "cache")


@pytest.fixture
def environment(tmp_dir: Path, assets_dir: Path, cache_store: FileStore) -> Environment:
    """An environment with one search path and no processors."""
    return Environment(tmp_dir, paths=[assets_dir.name], cache=cache_store)


@pytest.fixture
def js_environment(environment: Environment) -> Environment:
    """An environment whose scripts understand require/stub/depend_on directives."""
    environment.register_preprocessor("application/javascript", directive_processor)
    environment.register_preprocessor("text/css", directive_processor)
    return environment

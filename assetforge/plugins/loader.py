"""Plugin loader — resolves ``module:function`` entry points.

A plugin is any importable callable that accepts an ``Environment`` and
registers processors, engines or MIME types on it::

    # my_assets/plugin.py
    def register(environment):
        environment.register_engine(".coffee", compile_coffee,
                                    mime_type="application/javascript")

Enabled with ``ASSETFORGE_PLUGINS='["my_assets.plugin:register"]'``.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from assetforge.core.environment import Environment

logger = logging.getLogger(__name__)


class PluginLoadError(ImportError):
    """Raised when an entry point cannot be imported or is not callable."""


def resolve_entry_point(entry_point: str) -> Callable[..., Any]:
    """Import ``"package.module:attribute"`` and return the attribute.

    Raises
    ------
    PluginLoadError
        If the string is malformed, the module cannot be imported, or the
        attribute is missing or not callable.
    """
    module_name, sep, attribute = entry_point.partition(":")
    if not sep or not module_name or not attribute:
        raise PluginLoadError(f"Entry point {entry_point!r} must look like 'module:function'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise PluginLoadError(f"Cannot import {module_name!r} for {entry_point!r}: {exc}") from exc

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise PluginLoadError(f"{entry_point!r} has no attribute {part!r}") from exc
    if not callable(target):
        raise PluginLoadError(f"{entry_point!r} is not callable")
    return target


def load_plugins(environment: Environment, entry_points: Iterable[str]) -> list[str]:
    """Call each entry point with *environment*, in order.

    Returns
    -------
    list[str]
        The entry points that were loaded.
    """
    loaded: list[str] = []
    for entry_point in entry_points:
        register = resolve_entry_point(entry_point)
        register(environment)
        loaded.append(entry_point)
        logger.info("Loaded asset plugin %s", entry_point)
    return loaded

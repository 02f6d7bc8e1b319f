"""Plugin entry points that configure an environment."""

from assetforge.plugins.loader import PluginLoadError, load_plugins, resolve_entry_point

__all__ = ["PluginLoadError", "load_plugins", "resolve_entry_point"]

"""Built-in processors and the default registration hook."""

from assetforge.processors.builtin import charset_normalizer, register_defaults, safety_colons

__all__ = ["charset_normalizer", "register_defaults", "safety_colons"]

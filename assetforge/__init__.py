"""assetforge: content-addressed asset pipeline.

Source files run through ordered processor chains, related files are
concatenated into bundles, and results are cached under keys derived from
file contents so unchanged inputs are never reprocessed.
"""

__version__ = "0.1.0"
__description__ = "Content-addressed asset processing, bundling and caching"

from assetforge.core.asset import Asset, ProcessedAsset, StaticAsset
from assetforge.core.bundled_asset import BundledAsset
from assetforge.core.cached_environment import CachedEnvironment
from assetforge.core.environment import Environment
from assetforge.core.hasher import hexdigest

__all__ = [
    "Asset",
    "BundledAsset",
    "CachedEnvironment",
    "Environment",
    "ProcessedAsset",
    "StaticAsset",
    "hexdigest",
    "__version__",
]

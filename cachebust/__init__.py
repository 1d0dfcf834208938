"""Cachebust: content-hash cache busting for static site assets.

This package computes a stable digest of an asset's bytes (or of every file in
a source directory) and appends it to the asset reference as a query string,
so browsers refetch stylesheets and scripts whenever their content changes.

The main entry points are the ``bust_cache`` function, the Jinja2 filters in
the filters module, and the CLI module.
"""

from .digest import AssetNotFoundError, CacheDigester, bust_cache

__all__ = ["AssetNotFoundError", "CacheDigester", "__version__", "bust_cache"]
__version__ = "0.1.0"

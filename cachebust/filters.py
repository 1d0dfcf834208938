"""Jinja2 filters for cache busting.

The filters are bound to a project root and configuration and installed on
an explicitly passed Jinja2 environment, so templates can write::

    <link rel="stylesheet" href="{{ 'assets/css/main.css' | bust_css_cache }}">
    <script src="{{ bust_cache('assets/js/app.js') }}"></script>

Key class:
- CacheBustFilters: Holds the filter callables and installs them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment

from .config import DEFAULT_CONFIG
from .digest import CacheDigester


class CacheBustFilters:
    """Cache-busting filters bound to one project.

    Asset references starting with ``/`` are site URLs and are read relative
    to the project root; the returned string keeps the reference as written.

    Attributes:
        project_root: Directory that relative asset paths resolve against.
        config: Configuration dictionary (see config.DEFAULT_CONFIG).
    """

    def __init__(self, project_root: Path, config: dict[str, Any] | None = None):
        self.project_root = project_root
        self.config = {**DEFAULT_CONFIG, **(config or {})}

    def bust_cache(self, file_name: str, directory: str | None = None) -> str:
        """Append the digest of a file (or of a directory's files) to a reference.

        Args:
            file_name: Asset reference, e.g. "/assets/js/app.js".
            directory: Optional directory whose files are hashed instead.

        Returns:
            String like "/assets/js/app.js?5d41402abc4b2a76b9719d911017c592".
        """
        digester = CacheDigester(
            file_name=str(file_name).lstrip("/"),
            directory=None if directory is None else str(directory).lstrip("/"),
            root=self.project_root,
            algorithm=self.config["algorithm"],
            include_hidden=self.config["include_hidden"],
        )
        return f"{file_name}?{digester.hexdigest()}"

    def bust_css_cache(self, file_name: str) -> str:
        """Bust a compiled stylesheet by the digest of its Sass sources.

        Args:
            file_name: Stylesheet reference, e.g. "/assets/css/main.css".

        Returns:
            The reference with the digest of ``sass_dir`` appended.
        """
        return self.bust_cache(file_name, directory=self.config["sass_dir"])

    def install(self, env: Environment) -> None:
        """Register the filters and matching globals on a Jinja2 environment."""
        for name, func in (
            ("bust_cache", self.bust_cache),
            ("bust_css_cache", self.bust_css_cache),
        ):
            env.filters[name] = func
            env.globals[name] = func

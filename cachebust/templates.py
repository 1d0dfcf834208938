"""Template rendering with the cache-busting filters installed.

This module uses Jinja2 to render site templates. It manages template
loading and installs the filters from the filters module on its environment.

Key class:
- TemplateEngine: Renders named templates or template strings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from .config import DEFAULT_CONFIG
from .filters import CacheBustFilters


class RenderError(Exception):
    """Error during template rendering with template context.

    Attributes:
        template_name: Name of the template that failed.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        template_name: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.template_name = template_name
        self.message = message
        self.original_error = original_error
        super().__init__(f"{template_name}: {message}")


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        site_dir: Directory containing templates.
        project_root: Directory asset references resolve against.
        env: Jinja2 environment.
        filters: The installed cache-busting filters.
    """

    def __init__(
        self,
        site_dir: Path,
        project_root: Path | None = None,
        config: dict[str, Any] | None = None,
    ):
        """Initialize the template engine.

        Args:
            site_dir: Directory with templates.
            project_root: Base for asset paths; defaults to the parent of site_dir.
            config: Optional configuration dictionary.
        """
        self.site_dir = site_dir
        self.project_root = project_root or site_dir.parent
        self.env = Environment(
            loader=FileSystemLoader(
                [
                    site_dir / "_layouts",
                    site_dir / "_partials",
                    site_dir,
                ]
            ),
            autoescape=select_autoescape(["html", "xml"]),
            enable_async=False,
        )
        self.filters = CacheBustFilters(self.project_root, config or DEFAULT_CONFIG)
        self.filters.install(self.env)

    def render_template(self, name: str, context: dict[str, Any] | None = None) -> str:
        """Render a named template from the site directory.

        Args:
            name: Template name relative to one of the loader directories.
            context: Variables to make available in the template.

        Returns:
            Rendered string.

        Raises:
            TemplateNotFound: If no loader directory holds the template.
            RenderError: If the template fails to parse or render.
        """
        return self._render(
            name,
            lambda: self.env.get_template(name).render(**(context or {})),
        )

    def render_string(self, template: str, context: dict[str, Any] | None = None) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        return self._render(
            "<string>",
            lambda: self.env.from_string(template).render(**(context or {})),
        )

    def _render(self, name: str, render) -> str:
        try:
            return render()
        except TemplateNotFound:
            raise
        except TemplateSyntaxError as exc:
            raise RenderError(
                name,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except Exception as exc:
            raise RenderError(name, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if isinstance(exc, FileNotFoundError):
        return f"Missing asset: {error_msg}"
    if isinstance(exc, (IsADirectoryError, NotADirectoryError)):
        return f"Wrong asset kind: {error_msg}"

    return f"{error_type}: {error_msg}"

"""Command-line interface for Cachebust.

This module defines the CLI commands using Click framework.
Paths are resolved against the current working directory, which is taken
to be the project root.

Commands:
- digest: Print a cache-busted reference for a file or directory.
- css: Print a stylesheet reference busted by the configured Sass directory.
- render: Render a site template with the cache-busting filters installed.
"""

from __future__ import annotations

from pathlib import Path

import click
from jinja2 import TemplateNotFound

from . import __version__
from .config import ConfigError, load_config
from .digest import bust_cache
from .filters import CacheBustFilters
from .templates import RenderError, TemplateEngine


@click.group()
@click.version_option(version=__version__, prog_name="cachebust")
def cli():
    """Content-hash cache busting for static assets."""


@cli.command()
@click.argument("file_name")
@click.option(
    "--directory",
    "-d",
    required=False,
    help="Hash every file under this directory instead of FILE_NAME",
)
@click.option(
    "--algorithm",
    required=False,
    help="hashlib algorithm (overrides cachebust.yaml)",
)
def digest(file_name: str, directory: str | None, algorithm: str | None):
    """Print FILE_NAME with its content digest appended."""
    project_root = Path.cwd()
    config = _load_config_or_exit(project_root)
    try:
        result = bust_cache(
            file_name,
            directory,
            root=project_root,
            algorithm=algorithm or config["algorithm"],
            include_hidden=config["include_hidden"],
        )
    except (OSError, ValueError) as exc:
        _fail(directory or file_name, str(exc))
    click.echo(result)


@cli.command()
@click.argument("file_name")
def css(file_name: str):
    """Print FILE_NAME busted by the digest of the Sass sources."""
    project_root = Path.cwd()
    config = _load_config_or_exit(project_root)
    try:
        result = CacheBustFilters(project_root, config).bust_css_cache(file_name)
    except (OSError, ValueError) as exc:
        _fail(config["sass_dir"], str(exc))
    click.echo(result)


@cli.command()
@click.argument("template")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
    help="Write the rendered output to this file instead of stdout",
)
def render(template: str, output: Path | None):
    """Render TEMPLATE from the site directory."""
    project_root = Path.cwd()
    config = _load_config_or_exit(project_root)
    site_dir = project_root / config["site_dir"]
    engine = TemplateEngine(site_dir, project_root=project_root, config=config)
    try:
        rendered = engine.render_template(template)
    except TemplateNotFound as exc:
        _fail(template, f"Template not found: {exc}")
    except RenderError as exc:
        _fail(exc.template_name, exc.message)
    if output is None:
        click.echo(rendered, nl=False)
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        _fail(str(output), str(exc))
    click.echo(f"Rendered {template} into {output}")


def _load_config_or_exit(project_root: Path) -> dict:
    try:
        return load_config(project_root)
    except ConfigError as exc:
        rel_path = exc.source_path.relative_to(project_root)
        _fail(str(rel_path), f"{exc.key}: {exc.message}")


def _fail(path: str, message: str) -> None:
    """Report a failure in the build error format and exit with status 1."""
    click.echo(click.style("Cache bust failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {message}", fg="white"), err=True)
    raise SystemExit(1)


def main():
    """Entry point for the CLI application."""
    cli()

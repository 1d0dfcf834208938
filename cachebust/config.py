"""Configuration loading for Cachebust.

Settings live in an optional ``cachebust.yaml`` at the project root and are
layered over DEFAULT_CONFIG.

Keys:
- sass_dir: Stylesheet source directory hashed by ``bust_css_cache``.
- algorithm: hashlib algorithm used for digests.
- include_hidden: Whether dot-prefixed files under a directory are hashed.
- site_dir: Directory holding templates, layouts and partials.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .digest import DEFAULT_ALGORITHM, check_algorithm

CONFIG_FILENAME = "cachebust.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "sass_dir": "assets/_sass",
    "algorithm": DEFAULT_ALGORITHM,
    "include_hidden": False,
    "site_dir": "site",
}


class ConfigError(Exception):
    """Error raised for an invalid configuration value.

    Attributes:
        source_path: Path to the configuration file.
        key: The offending key.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, key: str, message: str):
        self.source_path = source_path
        self.key = key
        self.message = message
        super().__init__(f"{source_path}: {key}: {message}")


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from cachebust.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If a value has the wrong type or names an unknown algorithm.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    _validate(config, config_path)
    return config


def _validate(config: dict[str, Any], config_path: Path) -> None:
    for key in ("sass_dir", "site_dir"):
        if not isinstance(config[key], str) or not config[key]:
            raise ConfigError(config_path, key, "expected a non-empty path string")
    if not isinstance(config["include_hidden"], bool):
        raise ConfigError(config_path, "include_hidden", "expected true or false")
    try:
        config["algorithm"] = check_algorithm(config["algorithm"])
    except ValueError as exc:
        raise ConfigError(config_path, "algorithm", str(exc)) from exc

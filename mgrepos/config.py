#!/usr/bin/env python3
"""
Registry persistence for mgrepos.

The registry lives in a single JSON document named ``mgconfig``:

    {
      "Repos": [
        {"Path": "$HOME/src/tool", "Remote": "git@host:me/tool.git"}
      ],
      "Aliases": {"gc": "git gc"}
    }

Paths under the home directory are stored with the ``$HOME`` token and
expanded on load, so the file can be shared between machines.
"""

import os
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .domain.registry import DuplicateError, Registry, resolve_home
from .exit_codes import ConfigError
from .infra.file_store import FileStore
from .mrconfig import load_mrconfig


def _env_log_level() -> int:
    level = logging.getLevelName(os.environ.get("MGREPOS_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


# Configure logging
logging.basicConfig(
    level=_env_log_level(),
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)  # Default to stderr
    ]
)
logger = logging.getLogger("mgrepos")

CONFIG_FILENAME = "mgconfig"


def set_log_level(level: Union[int, str]) -> None:
    """Change the level of the package logger and the root handler."""
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger().setLevel(level)
    logger.setLevel(level)


def get_config_path() -> Path:
    """Get the path to the registry document.

    Checks in order:
    1. MGCONFIG environment variable (names the file itself)
    2. $XDG_CONFIG_HOME/mgconfig
    3. ~/.config/mgconfig, provided ~/.config is an existing directory

    Raises:
        ConfigError: if no location can be resolved
    """
    override = os.environ.get("MGCONFIG")
    if override:
        return Path(override)

    conf_dir = os.environ.get("XDG_CONFIG_HOME")
    if not conf_dir:
        home = resolve_home()
        if home is None:
            raise ConfigError("cannot resolve home directory")
        default_dir = Path(home) / ".config"
        if not default_dir.is_dir():
            raise ConfigError(f"config directory does not exist: {default_dir}")
        conf_dir = str(default_dir)

    return Path(conf_dir) / CONFIG_FILENAME


def registry_from_document(data: Any, source: str = "<document>", expand: bool = False) -> Registry:
    """
    Validate a decoded registry document and build a Registry from it.

    With ``expand`` the ``$HOME`` token is resolved and paths are checked
    for uniqueness after expansion; otherwise they are taken as written.

    Raises:
        ConfigError: if the document has the wrong shape or repeats a path
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected an object with 'Repos' and 'Aliases'")

    repos = data.get("Repos")
    if repos is None:
        repos = []
    if not isinstance(repos, list):
        raise ConfigError(f"{source}: 'Repos' must be a list")
    for i, entry in enumerate(repos):
        if not isinstance(entry, dict) or not isinstance(entry.get("Path"), str) or not entry["Path"]:
            raise ConfigError(f"{source}: repo {i} needs a non-empty 'Path'")
        if not isinstance(entry.get("Remote", ""), str):
            raise ConfigError(f"{source}: repo {i} has a non-string 'Remote'")
        if entry.get("Aliases") is not None and not isinstance(entry["Aliases"], dict):
            raise ConfigError(f"{source}: repo {i} 'Aliases' must be an object")

    if data.get("Aliases") is not None and not isinstance(data["Aliases"], dict):
        raise ConfigError(f"{source}: 'Aliases' must be an object")

    try:
        registry = Registry.from_dict(data)
        if expand:
            registry.expand_paths()
    except DuplicateError as e:
        raise ConfigError(f"{source}: {e}") from e
    return registry


def parse_registry(text: str, source: str = "<stdin>", fmt: str = "json",
                   expand: bool = False) -> Registry:
    """
    Parse a registry document.

    Args:
        text: Document contents
        source: Name used in error messages
        fmt: ``json`` or ``yaml``
        expand: Resolve the ``$HOME`` token in paths

    Raises:
        ConfigError: if the text cannot be decoded or has the wrong shape
    """
    try:
        if fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot parse {source}: {e}") from e
    return registry_from_document(data, source, expand)


def format_for(path: Union[str, Path]) -> str:
    """Document format implied by a file name."""
    if Path(path).suffix.lower() in (".yaml", ".yml"):
        return "yaml"
    return "json"


def load_registry(path: Optional[Path] = None) -> Registry:
    """
    Load the registry document and expand its paths.

    Raises:
        FileNotFoundError: if the document does not exist
        ConfigError: if it cannot be read or parsed
    """
    path = path or get_config_path()
    store = FileStore(path)
    if not store.path.exists():
        raise FileNotFoundError(f"no config at {path}")
    try:
        text = store.read_text()
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    registry = parse_registry(text, source=str(path), expand=True)
    logger.debug(f"Loaded {len(registry)} repositories from {path}")
    return registry


def save_registry(registry: Registry, path: Optional[Path] = None) -> Path:
    """
    Write the registry document with home-rooted paths collapsed.

    The registry passed in is not modified.

    Raises:
        ConfigError: if the document cannot be written
    """
    path = path or get_config_path()
    to_save = registry.copy()
    to_save.collapse_paths()
    try:
        FileStore(path).write(to_save.to_dict())
    except OSError as e:
        raise ConfigError(f"cannot save config to {path}: {e}") from e
    logger.debug(f"Configuration saved to {path}")
    return path


def get_registry() -> Registry:
    """
    Load the registry, migrating ``~/.mrconfig`` on first use.

    When no registry document exists yet, the legacy file is imported and
    saved straight away so later runs read the new document.

    Raises:
        ConfigError: if neither file is usable
    """
    path = get_config_path()
    try:
        return load_registry(path)
    except FileNotFoundError:
        logger.debug(f"No config at {path}, trying legacy mrconfig")

    try:
        legacy = load_mrconfig()
    except FileNotFoundError as e:
        raise ConfigError(f"no config at {path} and no legacy config to migrate ({e})") from e

    registry = legacy.to_registry()
    save_registry(registry, path)
    logger.info("migrated mrconfig to mgconfig")
    return registry

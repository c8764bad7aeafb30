"""
Importer for legacy myrepos ``~/.mrconfig`` files.

Only the subset mgrepos can represent is understood:

    # comment
    [DEFAULT]
    unregister = mr -c ~/.mrconfig unregister
    git_gc = git gc "$@"

    [src/project]
    checkout = git clone 'git@host:user/project.git' 'project'

Section paths are relative to the home directory unless absolute. Inside a
repository section only ``checkout`` is accepted; inside ``[DEFAULT]``
only ``unregister`` and ``git_gc``. The first line that does not fit is a
syntax error and the whole import fails.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .domain.registry import DuplicateError, Registry, resolve_home
from .exit_codes import ConfigError

logger = logging.getLogger(__name__)

MRCONFIG_NAME = ".mrconfig"

# Directives allowed in [DEFAULT] and the alias names they become.
DEFAULT_DIRECTIVES = {
    "unregister": "unregister",
    "git_gc": "gc",
}

_CLONE_RE = re.compile(r"^git clone '(?P<url>[^']*)' '(?P<dir>[^']*)'$")


class MrConfigSyntaxError(ConfigError):
    """Raised on the first line of a legacy file that cannot be parsed."""

    def __init__(self, lineno: int, line: str):
        super().__init__(f"unexpected argument on line {lineno}: {line}")
        self.lineno = lineno
        self.line = line


@dataclass
class LegacyRepo:
    """One ``[path]`` block of a legacy file."""
    path: str
    checkout: str = ""


@dataclass
class LegacyDocument:
    """Parsed legacy file, before conversion to a Registry."""
    repos: List[LegacyRepo] = field(default_factory=list)
    aliases: Dict[str, str] = field(default_factory=dict)

    def get_repo_paths(self) -> List[str]:
        return [repo.path for repo in self.repos]

    def to_registry(self) -> Registry:
        """
        Convert to a Registry.

        Checkout commands of the form ``git clone '<url>' '<dir>'`` are
        reduced to ``<url>``; any other command is kept verbatim as the
        remote, so the remote is not guaranteed to be a URL.
        """
        registry = Registry(aliases=dict(self.aliases))
        for repo in self.repos:
            try:
                registry.add_repo(repo.path, extract_clone_url(repo.checkout))
            except DuplicateError:
                logger.warning(f"Skipping repeated section for {repo.path}")
        return registry


def extract_clone_url(checkout: str) -> str:
    """Return the URL of a ``git clone '<url>' '<dir>'`` command, else the command."""
    match = _CLONE_RE.match(checkout)
    if match:
        return match.group("url")
    return checkout


def parse_mrconfig(text: str, home: Optional[str] = None) -> LegacyDocument:
    """
    Parse legacy file contents.

    Args:
        text: File contents
        home: Directory relative section paths are joined onto
            (defaults to the user's home directory)

    Returns:
        LegacyDocument in file order

    Raises:
        MrConfigSyntaxError: on the first unparseable line; ``lineno`` is
            0-based.
    """
    home = home if home is not None else (resolve_home() or "")
    doc = LegacyDocument()
    mode = "default"

    for lineno, raw in enumerate(text.split("\n")):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line == "[DEFAULT]":
            mode = "default"
            continue
        if line.startswith("[") and line.endswith("]"):
            path = line.strip("[]")
            if not os.path.isabs(path):
                path = os.path.join(home, path)
            doc.repos.append(LegacyRepo(path=os.path.normpath(path)))
            mode = "repo"
            continue

        key, sep, value = line.partition(" = ")
        if not sep:
            raise MrConfigSyntaxError(lineno, line)

        if mode == "repo":
            if key != "checkout":
                raise MrConfigSyntaxError(lineno, line)
            doc.repos[-1].checkout = value
        else:
            alias = DEFAULT_DIRECTIVES.get(key)
            if alias is None:
                raise MrConfigSyntaxError(lineno, line)
            doc.aliases[alias] = value

    return doc


def get_mrconfig_path(home: Optional[Union[str, Path]] = None) -> Path:
    """Location of the legacy file; not overridable."""
    if home is None:
        home = resolve_home()
        if home is None:
            raise ConfigError("cannot resolve home directory")
    return Path(home) / MRCONFIG_NAME


def load_mrconfig(home: Optional[Union[str, Path]] = None) -> LegacyDocument:
    """
    Read and parse ``~/.mrconfig``.

    Raises:
        FileNotFoundError: if the file does not exist
        ConfigError: if the path is a directory or cannot be read
        MrConfigSyntaxError: on malformed content
    """
    path = get_mrconfig_path(home)
    if not path.exists():
        raise FileNotFoundError(f"no legacy config at {path}")
    if path.is_dir():
        raise ConfigError(f"expected mrconfig file but got a directory: {path}")
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    logger.debug(f"Parsing legacy config {path}")
    return parse_mrconfig(text, home=str(path.parent))

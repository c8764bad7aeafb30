"""
Registry domain objects for mgrepos.

A Registry is the ordered set of tracked repositories plus global command
aliases. Paths are the identity of a repository: two entries never share
one. On disk, paths under the user's home directory are written with the
portable ``$HOME`` token so a registry can be shared between machines;
in memory they are always fully expanded.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

PORTABLE_HOME = "$HOME"
_HOME_TOKENS = (PORTABLE_HOME, "${HOME}")


class RegistryError(Exception):
    """Base class for registry model errors."""


class DuplicateError(RegistryError):
    """Raised when a path is already registered."""

    def __init__(self, path: str):
        super().__init__(f"repository already registered: {path}")
        self.path = path


class NotFoundError(RegistryError):
    """Raised when a path is not registered."""

    def __init__(self, path: str):
        super().__init__(f"repository not registered: {path}")
        self.path = path


def resolve_home() -> Optional[str]:
    """Return the invoking user's home directory, or None if unknown."""
    try:
        home = str(Path.home())
    except RuntimeError:
        return None
    return home or None


def expand_path(path: str, home: Optional[str] = None) -> str:
    """Replace a leading ``$HOME`` token with the home directory."""
    home = home if home is not None else resolve_home()
    if not home:
        return path
    for token in _HOME_TOKENS:
        if path == token:
            return home
        if path.startswith(token + os.sep) or path.startswith(token + "/"):
            return home + path[len(token):]
    return path


def collapse_path(path: str, home: Optional[str] = None) -> str:
    """Replace a leading home directory with the ``$HOME`` token."""
    home = home if home is not None else resolve_home()
    if not home:
        return path
    home = home.rstrip(os.sep) or os.sep
    if path == home:
        return PORTABLE_HOME
    if home != os.sep and path.startswith(home + os.sep):
        return PORTABLE_HOME + path[len(home):]
    return path


@dataclass
class Repository:
    """A tracked repository: where it lives and where it comes from."""
    path: str
    remote: str
    aliases: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted document shape."""
        result: Dict[str, Any] = {'Path': self.path, 'Remote': self.remote}
        if self.aliases:
            result['Aliases'] = dict(self.aliases)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Repository':
        return cls(
            path=data.get('Path', ''),
            remote=data.get('Remote', ''),
            aliases=dict(data.get('Aliases') or {}),
        )


@dataclass(frozen=True)
class MergeOutcome:
    """What a single merge call did."""
    new_paths: Tuple[str, ...] = ()
    duplicates: int = 0

    @property
    def added(self) -> int:
        return len(self.new_paths)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'merge',
            'added': self.added,
            'duplicates': self.duplicates,
            'new_paths': list(self.new_paths),
        }

    def __str__(self) -> str:
        lines = [f"Added repo {path}" for path in self.new_paths]
        lines.append("")
        lines.append(f"Added {self.added} new repos")
        lines.append(f"Skipped {self.duplicates} duplicate repos")
        return "\n".join(lines)


@dataclass
class Registry:
    """
    Ordered collection of tracked repositories and global aliases.

    Insertion order is kept: it is the order repositories are listed,
    saved and dispatched in.

    Example:
        registry = Registry()
        registry.add_repo("/home/me/src/tool", "git@host:me/tool.git")
        registry.get_repo_paths()  # ['/home/me/src/tool']
    """
    repos: List[Repository] = field(default_factory=list)
    aliases: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.repos)

    def __iter__(self) -> Iterator[Repository]:
        return iter(self.repos)

    def __contains__(self, path: object) -> bool:
        return any(repo.path == path for repo in self.repos)

    def get_repo(self, path: str) -> Repository:
        for repo in self.repos:
            if repo.path == path:
                return repo
        raise NotFoundError(path)

    def get_repo_paths(self) -> List[str]:
        """Return repository paths in registry order."""
        return [repo.path for repo in self.repos]

    def add_repo(self, path: str, remote: str,
                 aliases: Optional[Dict[str, str]] = None) -> Repository:
        """
        Append a repository.

        Raises:
            DuplicateError: if ``path`` is already registered. The registry
                is left untouched.
        """
        if path in self:
            raise DuplicateError(path)
        repo = Repository(path=path, remote=remote, aliases=dict(aliases or {}))
        self.repos.append(repo)
        return repo

    def del_repo(self, path: str) -> Repository:
        """
        Remove the repository registered at ``path``.

        Raises:
            NotFoundError: if nothing is registered at ``path``.
        """
        for i, repo in enumerate(self.repos):
            if repo.path == path:
                return self.repos.pop(i)
        raise NotFoundError(path)

    def merge(self, other: 'Registry') -> MergeOutcome:
        """
        Add every repository of ``other`` that is not already registered.

        Duplicates are counted, not raised. Any other error stops the merge
        and propagates; repositories added before it stay added, so a failed
        merge can leave the registry partially updated.
        """
        new_paths: List[str] = []
        duplicates = 0
        for repo in other.repos:
            try:
                self.add_repo(repo.path, repo.remote, repo.aliases)
            except DuplicateError:
                duplicates += 1
                continue
            new_paths.append(repo.path)
        return MergeOutcome(new_paths=tuple(new_paths), duplicates=duplicates)

    def expand_paths(self, home: Optional[str] = None) -> None:
        """
        Expand the ``$HOME`` token in every repository path, in place.

        Raises:
            DuplicateError: if two entries expand to the same path. The
                registry is left untouched.
        """
        home = home if home is not None else resolve_home()
        expanded = [expand_path(repo.path, home) for repo in self.repos]
        seen = set()
        for path in expanded:
            if path in seen:
                raise DuplicateError(path)
            seen.add(path)
        for repo, path in zip(self.repos, expanded):
            repo.path = path

    def collapse_paths(self, home: Optional[str] = None) -> None:
        """Collapse home-rooted repository paths to the ``$HOME`` token, in place."""
        home = home if home is not None else resolve_home()
        if not home:
            return
        for repo in self.repos:
            repo.path = collapse_path(repo.path, home)

    def copy(self) -> 'Registry':
        return Registry(
            repos=[Repository(r.path, r.remote, dict(r.aliases)) for r in self.repos],
            aliases=dict(self.aliases),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted document shape."""
        return {
            'Repos': [repo.to_dict() for repo in self.repos],
            'Aliases': dict(self.aliases),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Registry':
        """
        Build a registry from the persisted document shape.

        Raises:
            DuplicateError: if the document lists the same path twice.
        """
        registry = cls(aliases=dict(data.get('Aliases') or {}))
        for entry in data.get('Repos') or []:
            repo = Repository.from_dict(entry)
            registry.add_repo(repo.path, repo.remote, repo.aliases)
        return registry

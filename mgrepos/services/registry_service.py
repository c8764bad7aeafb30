"""
Registry management service for mgrepos.

Implements the register / unregister / import use cases on top of the
registry model, the git client and the config layer.
"""

import os
from dataclasses import dataclass
from typing import Optional

from ..config import get_registry, save_registry
from ..domain.registry import MergeOutcome, Registry, Repository
from ..infra.git_client import GitClient, NotARepositoryError


@dataclass(frozen=True)
class RegisterOutcome:
    """Result of registering one repository."""
    path: str
    remote: str
    added: bool

    def to_dict(self):
        return {'path': self.path, 'remote': self.remote, 'added': self.added}


class RegistryService:
    """
    Registry use cases behind the CLI.

    Example:
        service = RegistryService()
        outcome = service.register("~/src/tool")
        if not outcome.added:
            print("already registered")
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize RegistryService.

        Args:
            registry: Registry to work on (loads the configured one if None)
            git_client: GitClient instance (creates new if None)
        """
        self.registry = registry if registry is not None else get_registry()
        self.git = git_client or GitClient()

    def save(self) -> None:
        save_registry(self.registry)

    def resolve_repo_root(self, path: Optional[str] = None) -> str:
        """
        Resolve ``path`` (default: current directory) to the top level of
        the repository containing it.

        Raises:
            NotARepositoryError: if ``path`` is not inside a repository
            GitError: for any other git failure
        """
        path = os.path.abspath(os.path.expanduser(path or os.getcwd()))
        return self.git.open(path, search_parent=True).path

    def register(self, path: Optional[str] = None) -> RegisterOutcome:
        """
        Register the repository containing ``path`` with its first remote URL.

        Already registered repositories are left alone and reported with
        ``added=False``; the registry is only saved when something changed.

        Raises:
            NotARepositoryError: if ``path`` is not inside a repository
            GitError: if the repository has no remote URL
        """
        root = self.resolve_repo_root(path)
        if root in self.registry:
            return RegisterOutcome(path=root, remote=self.registry.get_repo(root).remote, added=False)

        remote = self.git.first_remote_url(root)
        self.registry.add_repo(root, remote)
        self.save()
        return RegisterOutcome(path=root, remote=remote, added=True)

    def unregister(self, path: Optional[str] = None) -> Repository:
        """
        Remove the repository containing ``path`` from the registry.

        A path that no longer holds a repository is matched as written, so
        deleted checkouts can still be unregistered.

        Raises:
            NotFoundError: if the resolved path is not registered
        """
        try:
            root = self.resolve_repo_root(path)
        except NotARepositoryError:
            root = os.path.abspath(os.path.expanduser(path or os.getcwd()))

        removed = self.registry.del_repo(root)
        self.save()
        return removed

    def import_registry(self, other: Registry) -> MergeOutcome:
        """
        Merge ``other`` into the registry and save it.

        ``other`` must already have its paths expanded. A merge that fails
        part way is not saved.
        """
        outcome = self.registry.merge(other)
        self.save()
        return outcome

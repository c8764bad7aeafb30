"""
Git client infrastructure for mgrepos.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Unlike a status probe, the sync operations need to tell failures apart,
so this client raises typed errors instead of returning exit codes.
"""

import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

# Fragments of git's stderr that mean "there is no repository here"
_NOT_A_REPO_MARKERS = (
    "not a git repository",
)
_UP_TO_DATE_MARKERS = (
    "already up to date",
    "already up-to-date",
)


class GitError(Exception):
    """A git command failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NotARepositoryError(GitError):
    """The path holds no git repository."""


class NoWorktreeError(GitError):
    """The repository has no working tree (bare repository)."""


class PullResult(Enum):
    """Outcome of a successful fast-forward pull."""
    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"


@dataclass(frozen=True)
class GitRepository:
    """An opened repository."""
    path: str
    git_dir: str
    bare: bool = False


@dataclass(frozen=True)
class GitOutput:
    """Captured result of one git invocation."""
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def message(self) -> str:
        """Best error text: stderr, then stdout, then the exit code."""
        text = (self.stderr or self.stdout).strip()
        return text or f"git exited with status {self.returncode}"


class GitClient:
    """
    Abstraction over git commands.

    Provides the operations the sync engine needs: open a repository,
    get its working tree, clone, and fast-forward pull.

    Example:
        client = GitClient()
        repo = client.open("/path/to/repo")
        if client.pull(client.worktree(repo)) is PullResult.UP_TO_DATE:
            print("Nothing to pull")
    """

    def __init__(self, timeout: Optional[int] = None, git: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Per-command timeout in seconds (default: none)
            git: git executable to run
        """
        self.timeout = timeout
        self.git = git

    def _run(self, args: Sequence[str], cwd: Optional[str] = None) -> GitOutput:
        """
        Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory

        Returns:
            GitOutput with stdout, stderr and return code

        Raises:
            GitError: if git cannot be started or times out
        """
        cmd = [self.git, *args]
        # Messages are matched as text, so keep git from translating them
        env = dict(os.environ, LC_ALL="C", GIT_TERMINAL_PROMPT="0")
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(f"git command timed out after {self.timeout}s: {' '.join(cmd)}") from e
        except OSError as e:
            raise GitError(f"cannot run git: {e}") from e

        return GitOutput(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def open(self, path: str, search_parent: bool = False) -> GitRepository:
        """
        Open the repository at ``path``.

        Args:
            path: Repository directory
            search_parent: Accept a repository enclosing ``path`` rather
                than requiring ``path`` to be its top level

        Raises:
            NotARepositoryError: nothing (or, without ``search_parent``,
                only an enclosing repository) is found at ``path``
            GitError: any other failure
        """
        if not os.path.isdir(path):
            raise NotARepositoryError(f"repository does not exist: {path}", path)

        out = self._run(["-C", path, "rev-parse", "--is-bare-repository", "--absolute-git-dir"])
        if not out.ok:
            message = out.message()
            if any(marker in message.lower() for marker in _NOT_A_REPO_MARKERS):
                raise NotARepositoryError(message, path)
            raise GitError(message, path)

        lines = out.stdout.strip().splitlines()
        if len(lines) < 2:
            raise GitError(f"unexpected rev-parse output: {out.stdout!r}", path)
        bare = lines[0].strip() == "true"
        git_dir = lines[1].strip()

        if bare:
            root = git_dir
        else:
            top = self._run(["-C", path, "rev-parse", "--show-toplevel"])
            if not top.ok:
                raise GitError(top.message(), path)
            root = top.stdout.strip()

        if not search_parent and os.path.realpath(root) != os.path.realpath(path):
            raise NotARepositoryError(f"repository does not exist: {path}", path)

        return GitRepository(path=root if search_parent else path, git_dir=git_dir, bare=bare)

    def worktree(self, repo: GitRepository) -> str:
        """
        Return the working tree directory of an opened repository.

        Raises:
            NoWorktreeError: for bare repositories
        """
        if repo.bare:
            raise NoWorktreeError(f"repository has no working tree: {repo.path}", repo.path)
        return repo.path

    def clone(self, url: str, path: str) -> None:
        """
        Clone ``url`` into ``path``.

        Raises:
            GitError: if the clone fails
        """
        out = self._run(["clone", "--", url, path])
        if not out.ok:
            raise GitError(out.message(), path)

    def pull(self, worktree: str) -> PullResult:
        """
        Fast-forward the working tree from its upstream.

        Returns:
            PullResult.UP_TO_DATE if there was nothing to pull

        Raises:
            GitError: if the pull fails or cannot fast-forward
        """
        out = self._run(["-C", worktree, "pull", "--ff-only"])
        if not out.ok:
            raise GitError(out.message(), worktree)
        if any(marker in out.stdout.lower() for marker in _UP_TO_DATE_MARKERS):
            return PullResult.UP_TO_DATE
        return PullResult.UPDATED

    def remotes(self, path: str) -> List[str]:
        """List remote names (git lists them sorted by name)."""
        out = self._run(["-C", path, "remote"])
        if not out.ok:
            raise GitError(out.message(), path)
        return [line.strip() for line in out.stdout.splitlines() if line.strip()]

    def remote_url(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get the first URL of a remote.

        Returns:
            Remote URL or None if the remote has no URL
        """
        out = self._run(["-C", path, "remote", "get-url", "--all", remote])
        if not out.ok:
            return None
        urls = [line.strip() for line in out.stdout.splitlines() if line.strip()]
        return urls[0] if urls else None

    def first_remote_url(self, path: str) -> str:
        """
        Get the first URL of the first remote.

        Raises:
            GitError: if the repository has no remote with a URL
        """
        remotes = self.remotes(path)
        url = self.remote_url(path, remotes[0]) if remotes else None
        if not url:
            raise GitError(f"no remote URL configured for {path}", path)
        return url

"""
Sync engine for mgrepos.

Applies one git operation to every repository of a registry on a fixed-size
worker pool:

- clone: clone repositories that are missing, leave existing ones alone
- pull: fast-forward every repository from its upstream

Every dispatched repository produces exactly one SyncResult, including when
the operation raises unexpectedly. Failures never stop the run; they are
collected in the SyncReport for the caller to render. The engine neither
logs nor exits: that is left to the command layer.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Generator, List, Optional

from ..domain.operation import SyncReport, SyncResult
from ..domain.registry import Registry, Repository
from ..exit_codes import ConfigError
from ..infra.git_client import GitClient, GitError, NotARepositoryError, PullResult

SyncGenerator = Generator[SyncResult, None, SyncReport]


def validate_jobs(jobs: int) -> int:
    """
    Check a worker count.

    Raises:
        ConfigError: if ``jobs`` is not a positive integer
    """
    if isinstance(jobs, bool) or not isinstance(jobs, int) or jobs < 1:
        raise ConfigError("jobs must be greater than 0")
    return jobs


class SyncService:
    """
    Clone or pull every repository of a registry in parallel.

    Example:
        service = SyncService()
        report = service.clone_all(registry, jobs=4)
        print(f"{report.failed} repositories failed")

    Or, to see results as they arrive:

        for result in service.iter_pull(registry, jobs=4):
            print(result.path, result.status.value)
        report = service.last_report
    """

    def __init__(self, git_client: Optional[GitClient] = None):
        """
        Initialize SyncService.

        Args:
            git_client: GitClient instance (creates new if None)
        """
        self.git = git_client or GitClient()
        self.last_report: Optional[SyncReport] = None

    def clone_all(self, registry: Registry, jobs: int = 1) -> SyncReport:
        """Clone every missing repository and return the report."""
        return self._drain(self.iter_clone(registry, jobs))

    def pull_all(self, registry: Registry, jobs: int = 1) -> SyncReport:
        """Pull every repository and return the report."""
        return self._drain(self.iter_pull(registry, jobs))

    def iter_clone(self, registry: Registry, jobs: int = 1) -> SyncGenerator:
        """
        Clone every missing repository, yielding results as they complete.

        The job count is checked before this returns, so a bad value fails
        before any repository is touched.

        Yields:
            One SyncResult per repository, in completion order

        Returns:
            SyncReport (also kept as ``last_report``)
        """
        validate_jobs(jobs)
        self.last_report = SyncReport(operation="clone")
        return self._dispatch(self.last_report, self.clone_one, list(registry.repos), jobs)

    def iter_pull(self, registry: Registry, jobs: int = 1) -> SyncGenerator:
        """Pull every repository, yielding results as they complete."""
        validate_jobs(jobs)
        self.last_report = SyncReport(operation="pull")
        return self._dispatch(self.last_report, self.pull_one, list(registry.repos), jobs)

    @staticmethod
    def _drain(results: SyncGenerator) -> SyncReport:
        while True:
            try:
                next(results)
            except StopIteration as stop:
                return stop.value

    def _dispatch(
        self,
        report: SyncReport,
        sync_one: Callable[[Repository], SyncResult],
        repos: List[Repository],
        jobs: int,
    ) -> SyncGenerator:
        """Run ``sync_one`` for each of ``repos`` on ``jobs`` workers."""
        operation = report.operation

        def run(repo: Repository) -> SyncResult:
            try:
                result = sync_one(repo)
            except Exception as e:  # a unit of work must never be dropped
                result = SyncResult.failed(repo.path, f"{operation}_failed", e)
            report.add_result(result)
            return result

        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix=f"mg-{operation}") as executor:
            futures = [executor.submit(run, repo) for repo in repos]
            for future in as_completed(futures):
                yield future.result()

        return report

    def clone_one(self, repo: Repository) -> SyncResult:
        """
        Make sure one repository exists locally.

        - opens: already satisfied
        - not a repository: create the parent directory and clone
        - any other open error: failed, no clone attempted
        """
        try:
            self.git.open(repo.path)
        except NotARepositoryError:
            try:
                Path(repo.path).parent.mkdir(parents=True, exist_ok=True)
                self.git.clone(repo.remote, repo.path)
            except (GitError, OSError) as e:
                return SyncResult.failed(repo.path, "clone_failed", e)
            return SyncResult.succeeded(repo.path, "cloned")
        except GitError as e:
            return SyncResult.failed(repo.path, "open_failed", e)

        return SyncResult.already_satisfied(repo.path, "already_cloned")

    def pull_one(self, repo: Repository) -> SyncResult:
        """Fast-forward one repository from its upstream."""
        try:
            opened = self.git.open(repo.path)
        except GitError as e:
            return SyncResult.failed(repo.path, "open_failed", e)

        try:
            worktree = self.git.worktree(opened)
        except GitError as e:
            return SyncResult.failed(repo.path, "worktree_failed", e)

        try:
            outcome = self.git.pull(worktree)
        except GitError as e:
            return SyncResult.failed(repo.path, "pull_failed", e)

        if outcome is PullResult.UP_TO_DATE:
            return SyncResult.already_satisfied(repo.path, "up_to_date")
        return SyncResult.succeeded(repo.path, "pulled")

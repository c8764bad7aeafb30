"""
Sync result domain objects for mgrepos.

One SyncResult is produced per repository per sync run; a SyncReport
aggregates them. Workers record into the report concurrently, so the
report serializes its own mutation.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SyncStatus(Enum):
    """Outcome of syncing one repository."""
    ALREADY_SATISFIED = "already_satisfied"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncResult:
    """
    What happened to one repository during a sync run.

    ``error`` is only set for FAILED results and carries the original
    error text.
    """
    path: str
    status: SyncStatus
    action: str  # e.g. "cloned", "already_cloned", "pulled", "up_to_date"
    error: Optional[str] = None

    @classmethod
    def already_satisfied(cls, path: str, action: str) -> 'SyncResult':
        return cls(path=path, status=SyncStatus.ALREADY_SATISFIED, action=action)

    @classmethod
    def succeeded(cls, path: str, action: str) -> 'SyncResult':
        return cls(path=path, status=SyncStatus.SUCCEEDED, action=action)

    @classmethod
    def failed(cls, path: str, action: str, error: Any) -> 'SyncResult':
        return cls(path=path, status=SyncStatus.FAILED, action=action,
                   error=str(error) or type(error).__name__)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'path': self.path,
            'status': self.status.value,
            'action': self.action,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass(frozen=True)
class SyncFailure:
    """A failed repository and the reason."""
    path: str
    error: str


@dataclass
class SyncReport:
    """
    Summary of one sync run across a registry.

    ``failures`` is in completion order, which is not dispatch order when
    more than one worker runs.
    """
    operation: str  # "clone" or "pull"
    total: int = 0
    succeeded: int = 0
    already_satisfied: int = 0
    failed: int = 0
    failures: List[SyncFailure] = field(default_factory=list)
    results: List[SyncResult] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock,
                                  init=False, repr=False, compare=False)

    @property
    def success(self) -> bool:
        """True if no repository failed."""
        return self.failed == 0

    def add_result(self, result: SyncResult) -> None:
        """Record one repository's outcome and update counts."""
        with self._lock:
            self.results.append(result)
            self.total += 1
            if result.status == SyncStatus.SUCCEEDED:
                self.succeeded += 1
            elif result.status == SyncStatus.ALREADY_SATISFIED:
                self.already_satisfied += 1
            else:
                self.failed += 1
                self.failures.append(SyncFailure(result.path, result.error or ""))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'operation': self.operation,
            'total': self.total,
            'succeeded': self.succeeded,
            'already_satisfied': self.already_satisfied,
            'failed': self.failed,
            'failures': [{'path': f.path, 'error': f.error} for f in self.failures],
        }

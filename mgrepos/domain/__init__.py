"""
Domain layer for mgrepos.

Contains pure domain objects with no git or file I/O:
- Registry / Repository: tracked repositories and aliases
- MergeOutcome: result of merging one registry into another
- SyncResult / SyncReport: outcomes of a sync run
"""

from .registry import (
    PORTABLE_HOME,
    DuplicateError,
    MergeOutcome,
    NotFoundError,
    Registry,
    RegistryError,
    Repository,
)
from .operation import SyncFailure, SyncReport, SyncResult, SyncStatus

__all__ = [
    'PORTABLE_HOME',
    'DuplicateError',
    'MergeOutcome',
    'NotFoundError',
    'Registry',
    'RegistryError',
    'Repository',
    'SyncFailure',
    'SyncReport',
    'SyncResult',
    'SyncStatus',
]

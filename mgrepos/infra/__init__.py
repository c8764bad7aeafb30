"""
Infrastructure layer for mgrepos.

Contains abstractions for external systems:
- GitClient: Git command execution
- FileStore: JSON document persistence

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import (
    GitClient,
    GitError,
    GitRepository,
    NotARepositoryError,
    NoWorktreeError,
    PullResult,
)
from .file_store import FileStore

__all__ = [
    'GitClient',
    'GitError',
    'GitRepository',
    'NotARepositoryError',
    'NoWorktreeError',
    'PullResult',
    'FileStore',
]

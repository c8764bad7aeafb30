"""
mgrepos - register many git repositories and keep them in sync.

mgrepos keeps a registry of repository paths and remotes, imports legacy
myrepos configuration, and clones or pulls every registered repository
in parallel.

Quick Start:
    import mgrepos

    registry = mgrepos.get_registry()
    registry.add_repo("/home/me/src/tool", "git@host:me/tool.git")
    mgrepos.save_registry(registry)

    report = mgrepos.SyncService().clone_all(registry, jobs=4)
    print(report.succeeded, report.already_satisfied, report.failed)

Domain Objects:
    Registry - Ordered, path-unique set of repositories plus aliases
    Repository - Path, remote and repo-scoped aliases
    MergeOutcome - New paths and duplicate count of a merge
    SyncReport - Aggregated outcome of a clone or pull run
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    DuplicateError,
    MergeOutcome,
    NotFoundError,
    Registry,
    RegistryError,
    Repository,
    SyncReport,
    SyncResult,
    SyncStatus,
)

# Services
from .services import RegistryService, SyncService

# Legacy import
from .mrconfig import LegacyDocument, MrConfigSyntaxError, load_mrconfig, parse_mrconfig

# Configuration
from .config import get_registry, load_registry, parse_registry, save_registry

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "DuplicateError",
    "MergeOutcome",
    "NotFoundError",
    "Registry",
    "RegistryError",
    "Repository",
    "SyncReport",
    "SyncResult",
    "SyncStatus",
    # Services
    "RegistryService",
    "SyncService",
    # Legacy import
    "LegacyDocument",
    "MrConfigSyntaxError",
    "load_mrconfig",
    "parse_mrconfig",
    # Configuration
    "get_registry",
    "load_registry",
    "parse_registry",
    "save_registry",
]

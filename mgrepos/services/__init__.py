"""
Service layer for mgrepos.

Contains business logic that orchestrates domain objects and infrastructure:
- SyncService: Parallel clone / pull across the registry
- RegistryService: Register, unregister and import

Services are the primary API for commands to use.
They handle coordination between infrastructure and domain layers.
"""

from .sync_service import SyncService, validate_jobs
from .registry_service import RegisterOutcome, RegistryService

__all__ = [
    'SyncService',
    'validate_jobs',
    'RegisterOutcome',
    'RegistryService',
]

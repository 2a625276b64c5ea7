"""
Domain Services Package

Architectural Intent:
- Contains the release lifecycle logic, expressed against ports only
- Every fleet-wide read goes through the FleetConsistencyChecker
"""

from slipway.domain.services.fleet_consistency import (
    FleetConsistencyChecker,
    ensure_agreement,
)
from slipway.domain.services.release_store import ReleaseStore
from slipway.domain.services.remote_sanity import RemoteSanityCheck
from slipway.domain.services.release_staging import (
    ReleaseStagingEngine,
    StagedRelease,
)
from slipway.domain.services.release_state_machine import (
    ReleaseStateMachine,
    rollback_target,
)
from slipway.domain.services.retention import RetentionManager, select_prune_set

__all__ = [
    "FleetConsistencyChecker",
    "ensure_agreement",
    "ReleaseStore",
    "RemoteSanityCheck",
    "ReleaseStagingEngine",
    "StagedRelease",
    "ReleaseStateMachine",
    "rollback_target",
    "RetentionManager",
    "select_prune_set",
]

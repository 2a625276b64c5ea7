"""
Publish / Rollback State Machine

Architectural Intent:
- Publish: swap `current` onto whatever `upcoming` references, atomically,
  identically for fresh deploys and rollbacks
- Rollback preparation: point `upcoming` at the release immediately preceding
  `current`; no directory is created and nothing is copied
"""

from __future__ import annotations
import logging
from typing import List

from slipway.domain.entities.deployment_state import DeploymentState
from slipway.domain.errors import NoCurrentRelease, NoRollbackTarget
from slipway.domain.services.release_store import ReleaseStore
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


def rollback_target(releases: List[str], current: str) -> str:
    """Returns the release immediately preceding `current` in chronological order."""
    if len(releases) < 2:
        raise NoRollbackTarget("fewer than two releases exist")
    if current not in releases:
        raise NoRollbackTarget(f"current release {current} is not in the release list")
    index = releases.index(current)
    if index < 1:
        raise NoRollbackTarget(f"{current} is the oldest release")
    return releases[index - 1]


class ReleaseStateMachine:
    def __init__(self, store: ReleaseStore) -> None:
        self._store = store

    async def publish(self, nodes: List[Node]) -> tuple[DeploymentState, DeploymentState]:
        """Returns the (before, after) states of the swap."""
        before = await self._store.inspect_state(nodes)
        after = before.publish()
        await self._store.promote_upcoming(nodes)
        logger.info("Published %s (was %s)", after.current, before.current or "nothing")
        return before, after

    async def prepare_rollback(self, nodes: List[Node]) -> tuple[str, str]:
        """Stages the previous release as upcoming. Returns (current, target)."""
        state = await self._store.inspect_state(nodes)
        current = state.current
        if not current:
            raise NoCurrentRelease()

        releases = await self._store.list_releases(nodes)
        logger.info("Dist releases: %s", releases)
        logger.info("Current release: %s", current)

        target = rollback_target(releases, current)
        state.stage(target)

        logger.warning("Rolling back to %s", self._store.layout.release_path(target))
        await self._store.link_upcoming(nodes, target)
        return current, target

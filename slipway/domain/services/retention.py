"""
Retention Manager

Keeps `keep_releases` historical releases plus the published one. A stale
`upcoming` left by an abandoned run is cleared first, best effort.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from slipway.domain.errors import RetentionViolation, SlipwayError
from slipway.domain.services.release_store import ReleaseStore
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)

DEFAULT_KEEP_RELEASES = 3


def select_prune_set(
    releases: List[str], keep_releases: int, current: Optional[str] = None
) -> List[str]:
    """
    The oldest `len(releases) - keep_releases - 1` releases. The extra one
    reserves the published release, which is kept on top of the quota.
    """
    if keep_releases < 0:
        raise ValueError(f"keep_releases must be >= 0, got {keep_releases}")
    ordered = sorted(releases)
    if len(ordered) <= keep_releases + 1:
        return []
    prune = ordered[: len(ordered) - keep_releases - 1]
    if current is not None and current in prune:
        raise RetentionViolation(current)
    return prune


class RetentionManager:
    def __init__(
        self, store: ReleaseStore, keep_releases: int = DEFAULT_KEEP_RELEASES
    ) -> None:
        self._store = store
        self.keep_releases = keep_releases

    async def discard_stale_upcoming(self, nodes: List[Node]) -> Optional[str]:
        """
        Best effort; failures are logged and swallowed.

        Only a target newer than current is deleted. An older target is a
        historical release left by an abandoned rollback and stays a rollback
        candidate, so just the link is removed.
        """
        logger.warning("Removing upcoming release, if any")
        try:
            upcoming = await self._store.resolve_upcoming(nodes)
            if upcoming is None:
                return None
            current = await self._store.resolve_current(nodes)
            # only a freshly staged release is newer than current;
            # an older target is a historical release from an abandoned rollback
            if current is None or upcoming > current:
                await self._store.remove_releases(nodes, [upcoming])
            await self._store.unlink_upcoming(nodes)
            return upcoming
        except SlipwayError as e:
            logger.warning("Could not remove upcoming release: %s", e)
            return None

    async def cleanup(self, nodes: List[Node]) -> List[str]:
        await self.discard_stale_upcoming(nodes)

        releases = await self._store.list_releases(nodes)
        current = await self._store.resolve_current(nodes)
        prune = select_prune_set(releases, self.keep_releases, current)
        if not prune:
            return []

        logger.warning("Dropping %s", ", ".join(prune))
        await self._store.remove_releases(nodes, prune)
        return prune

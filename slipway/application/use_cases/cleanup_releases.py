"""
Cleanup Releases Use Case

Architectural Intent:
- deploy:cleanup drops a stale `upcoming` and prunes releases beyond the
  retention window, never touching the published one
"""

import logging
from typing import List, Optional

from slipway.domain.events.release_events import ReleasesPrunedEvent
from slipway.domain.ports.event_bus_port import EventBusPort
from slipway.domain.services.retention import RetentionManager
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


class CleanupReleases:
    def __init__(
        self,
        retention: RetentionManager,
        nodes: List[Node],
        deploy_to: str,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.retention = retention
        self.nodes = nodes
        self.deploy_to = deploy_to
        self.event_bus = event_bus

    async def execute(self) -> List[str]:
        logger.info("Cleanup old releases")
        pruned = await self.retention.cleanup(self.nodes)

        if self.event_bus:
            await self.event_bus.publish([
                ReleasesPrunedEvent(aggregate_id=self.deploy_to, pruned=tuple(pruned))
            ])
        logger.info("Done")
        return pruned

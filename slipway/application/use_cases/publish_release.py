"""
Publish Release Use Cases

Architectural Intent:
- deploy:publish swaps `current` onto `upcoming`; shared by deploy and rollback
- deploy:restart invokes the configured restart commands on the fleet
"""

import logging
from typing import List, Optional

from slipway.domain.entities.deployment_state import DeploymentState
from slipway.domain.events.release_events import (
    ReleasePublishedEvent,
    ServicesRestartedEvent,
)
from slipway.domain.ports.event_bus_port import EventBusPort
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.services.release_state_machine import ReleaseStateMachine
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


class PublishRelease:
    def __init__(
        self,
        state_machine: ReleaseStateMachine,
        nodes: List[Node],
        deploy_to: str,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.state_machine = state_machine
        self.nodes = nodes
        self.deploy_to = deploy_to
        self.event_bus = event_bus

    async def execute(self) -> DeploymentState:
        logger.info("Publishing current release")
        before, after = await self.state_machine.publish(self.nodes)

        if self.event_bus:
            await self.event_bus.publish([
                ReleasePublishedEvent(
                    aggregate_id=self.deploy_to,
                    release=after.current or "",
                    previous=before.current or "",
                )
            ])
        logger.info("Done")
        return after


class RestartServices:
    def __init__(
        self,
        executor: RemoteExecutorPort,
        commands: tuple[str, ...],
        nodes: List[Node],
        deploy_to: str,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.executor = executor
        self.commands = commands
        self.nodes = nodes
        self.deploy_to = deploy_to
        self.event_bus = event_bus

    async def execute(self) -> int:
        logger.info("Restart")
        if not self.commands:
            logger.warning("No restart commands supplied")

        for command in self.commands:
            await self.executor.run_remote(self.nodes, command)

        if self.event_bus:
            await self.event_bus.publish([
                ServicesRestartedEvent(
                    aggregate_id=self.deploy_to, commands=len(self.commands)
                )
            ])
        logger.info("Done")
        return len(self.commands)

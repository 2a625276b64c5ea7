"""
Stage Release Use Cases

Architectural Intent:
- deploy:update materializes a new release and points `upcoming` at it
- deploy:setup runs the configured setup commands inside `upcoming`,
  before it is published
"""

import logging
import shlex
from typing import List, Optional

from slipway.domain.events.release_events import ReleaseStagedEvent, SetupCompletedEvent
from slipway.domain.ports.event_bus_port import EventBusPort
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.ports.source_control_port import SourceControlPort
from slipway.domain.services.release_staging import ReleaseStagingEngine, StagedRelease
from slipway.domain.value_objects.deploy_layout import DeployLayout
from slipway.domain.value_objects.node import Node

logger = logging.getLogger(__name__)


class StageRelease:
    def __init__(
        self,
        vcs: SourceControlPort,
        staging: ReleaseStagingEngine,
        workspace: str,
        nodes: List[Node],
        deploy_to: str,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.vcs = vcs
        self.staging = staging
        self.workspace = workspace
        self.nodes = nodes
        self.deploy_to = deploy_to
        self.event_bus = event_bus

    async def execute(self) -> StagedRelease:
        logger.info("Updating remote sources")
        revision = await self.vcs.revision(self.workspace)
        staged = await self.staging.stage(self.nodes, revision)

        if self.event_bus:
            await self.event_bus.publish([
                ReleaseStagedEvent(
                    aggregate_id=self.deploy_to,
                    release=str(staged.name),
                    seeded_from=staged.seeded_from or "",
                )
            ])
        logger.info("Done")
        return staged


class RunSetup:
    def __init__(
        self,
        executor: RemoteExecutorPort,
        layout: DeployLayout,
        commands: tuple[str, ...],
        nodes: List[Node],
        event_bus: Optional[EventBusPort] = None,
    ):
        self.executor = executor
        self.layout = layout
        self.commands = commands
        self.nodes = nodes
        self.event_bus = event_bus

    async def execute(self) -> int:
        logger.info("Setting up deployment")
        upcoming = shlex.quote(self.layout.upcoming_path)
        for command in self.commands:
            await self.executor.run_remote(self.nodes, f"cd {upcoming} && {command}")

        if self.event_bus:
            await self.event_bus.publish([
                SetupCompletedEvent(
                    aggregate_id=self.layout.deploy_to, commands=len(self.commands)
                )
            ])
        logger.info("Done")
        return len(self.commands)
